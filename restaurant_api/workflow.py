"""
Table booking workflow.

Drives one booking from slot selection to confirmation::

    SELECTING_DATE_TIME -> SELECTING_TABLES -> ENTERING_DETAILS
        -> SUBMITTING -> CONFIRMED | FAILED

``BookingWorkflow.for_update`` starts an edit of an existing reservation
directly in SELECTING_TABLES with everything pre-filled.

Input problems raise ``ValidationError`` and leave the state untouched.
Submission problems move the workflow to FAILED, from where it can go back
to table selection or resubmit.
"""
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as SchemaError
from .errors import BookingError, ConflictError, ValidationError
from .schemas import DEFAULT_MAX_GUESTS, normalize_phone
from .session import UserSession
from .utils.time import normalize_slot, parse_date

logger = logging.getLogger(__name__)

_email = TypeAdapter(EmailStr)


class BookingState(Enum):
    SELECTING_DATE_TIME = "selecting_date_time"
    SELECTING_TABLES = "selecting_tables"
    ENTERING_DETAILS = "entering_details"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class TableStatus(Enum):
    AVAILABLE = "available"
    SELECTED = "selected"
    RESERVED = "reserved"


class InvalidTransition(RuntimeError):
    pass


@dataclass(frozen=True)
class CustomerDetails:
    full_name: str
    phone: str
    email: str


@dataclass(frozen=True)
class Confirmation:
    order_id: str
    full_name: str
    phone: str
    email: str
    date: date
    time: str
    guests: int
    tables: tuple[str, ...]
    updated: bool = False


class BookingWorkflow:
    def __init__(self, client, session: UserSession | None = None):
        self.client = client
        self.session = session
        self.state = BookingState.SELECTING_DATE_TIME

        self.date: date | None = None
        self.time: str | None = None
        self.guests: int | None = None

        self.tables: list[dict] = []
        self.reserved: set[str] = set()
        self.selected: list[str] = []
        self.details: CustomerDetails | None = None

        self.order_id: str | None = None
        self._held: frozenset[str] = frozenset()

        self.confirmation: Confirmation | None = None
        self.error: BookingError | None = None

    @classmethod
    def for_update(cls, client, reservation: dict, session: UserSession | None = None) -> "BookingWorkflow":
        """Edits ``reservation`` (as returned by the service) in place."""
        wf = cls(client, session)
        wf.order_id = reservation["orderId"]
        wf._held = frozenset(reservation["tables"])
        wf.details = CustomerDetails(
            full_name=reservation["fullName"],
            phone=reservation["phone"],
            email=reservation["email"],
        )
        day = parse_date(reservation["date"])
        slot = normalize_slot(reservation["time"])
        wf._load_availability(day, slot)
        wf.date, wf.time, wf.guests = day, slot, int(reservation["guests"])
        wf.selected = list(reservation["tables"])
        wf.state = BookingState.SELECTING_TABLES
        return wf

    @property
    def editing(self) -> bool:
        return self.order_id is not None

    def _require(self, *states: BookingState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.name for s in states)
            raise InvalidTransition(f"Not allowed in {self.state.name}; expected one of {allowed}.")

    def _fail_input(self, message: str, field: str):
        self.error = ValidationError(message, field=field)
        raise self.error

    def _check_guests(self, guests) -> int:
        try:
            guests = int(guests)
        except (TypeError, ValueError):
            self._fail_input("Number of guests must be a whole number.", "guests")
        if not 1 <= guests <= DEFAULT_MAX_GUESTS:
            self._fail_input(f"Number of guests must be between 1 and {DEFAULT_MAX_GUESTS}.", "guests")
        return guests

    def _load_availability(self, day: date, slot: str) -> None:
        tables = self.client.list_tables()
        reserved = self.client.reserved_tables(day, slot, exclude_order_id=self.order_id)
        self.tables = tables
        self.reserved = reserved - self._held

    # SELECTING_DATE_TIME

    def select_date_time(self, day, time_slot: str | None, guests=1) -> None:
        self._require(BookingState.SELECTING_DATE_TIME)

        if not day:
            self._fail_input("Please select a date.", "date")
        if isinstance(day, str):
            try:
                day = parse_date(day)
            except ValueError:
                self._fail_input("Date must be in YYYY-MM-DD format.", "date")
        if day < date.today():
            self._fail_input("Reservation date cannot be in the past.", "date")
        if not time_slot:
            self._fail_input("Please select a time slot.", "time")
        try:
            slot = normalize_slot(time_slot)
        except ValueError as e:
            self._fail_input(str(e), "time")
        guests = self._check_guests(guests)

        self._load_availability(day, slot)
        self.date, self.time, self.guests = day, slot, guests
        self.selected = []
        self.error = None
        self.state = BookingState.SELECTING_TABLES

    # SELECTING_TABLES

    def refresh_availability(self) -> None:
        """Re-reads reserved tables and drops any that are no longer free from the selection."""
        self._require(BookingState.SELECTING_TABLES, BookingState.ENTERING_DETAILS, BookingState.FAILED)
        self._load_availability(self.date, self.time)
        self.selected = [t for t in self.selected if t not in self.reserved]

    def table_status(self, table_id: str) -> TableStatus:
        if table_id in self.selected:
            return TableStatus.SELECTED
        if table_id in self.reserved:
            return TableStatus.RESERVED
        return TableStatus.AVAILABLE

    def statuses(self) -> dict[str, TableStatus]:
        return {t["id"]: self.table_status(t["id"]) for t in self.tables}

    def toggle_table(self, table_id: str) -> bool:
        """Flips ``table_id`` in the selection. Reserved tables are left alone and return False."""
        self._require(BookingState.SELECTING_TABLES)
        if table_id in self.reserved:
            return False
        if table_id not in {t["id"] for t in self.tables}:
            self._fail_input(f"Unknown table {table_id}.", "tables")
        if table_id in self.selected:
            self.selected.remove(table_id)
        else:
            self.selected.append(table_id)
        return True

    def proceed_to_details(self) -> None:
        self._require(BookingState.SELECTING_TABLES)
        if not self.selected:
            self._fail_input("Please select at least one table to reserve.", "tables")
        self.error = None
        self.state = BookingState.ENTERING_DETAILS

    def back_to_date_time(self) -> None:
        self._require(BookingState.SELECTING_TABLES)
        if self.editing:
            raise InvalidTransition("The slot of a reservation under edit is fixed.")
        self.selected = []
        self.state = BookingState.SELECTING_DATE_TIME

    # ENTERING_DETAILS

    def suggested_details(self) -> CustomerDetails | None:
        """Details to pre-fill the form with: the ones being edited, else the logged-in user's."""
        if self.details:
            return self.details
        if self.session:
            return CustomerDetails(self.session.full_name, self.session.phone, self.session.email)
        return None

    def enter_details(self, full_name: str, phone: str, email: str, agree: bool, guests=None) -> None:
        """``guests`` overrides the party size chosen with the slot; edits change it here."""
        self._require(BookingState.ENTERING_DETAILS)
        full_name = (full_name or "").strip()
        if not full_name:
            self._fail_input("Full name is required.", "fullName")
        try:
            phone = normalize_phone(phone)
        except ValueError as e:
            self._fail_input(str(e), "phone")
        if not email or not email.strip():
            self._fail_input("Email is required.", "email")
        try:
            email = _email.validate_python(email.strip())
        except SchemaError:
            self._fail_input("Email address is not valid.", "email")
        if not agree:
            self._fail_input("You must agree to the terms and conditions.", "agree")
        if guests is not None:
            self.guests = self._check_guests(guests)

        self.details = CustomerDetails(full_name=full_name, phone=phone, email=email)
        self.error = None

    # SUBMITTING

    def _payload(self) -> dict:
        payload = {
            "fullName": self.details.full_name,
            "phone": self.details.phone,
            "email": self.details.email,
            "date": self.date.isoformat(),
            "time": self.time,
            "guests": self.guests,
            "tables": list(self.selected),
        }
        if self.session:
            payload["userId"] = self.session.user_id
        if self.editing:
            payload["orderId"] = self.order_id
        return payload

    def submit(self) -> Confirmation | None:
        """
        Sends the booking. Returns the confirmation, or None after moving to
        FAILED with ``error`` set. A conflict also refreshes availability so
        the tables someone else took show as reserved.
        """
        self._require(BookingState.ENTERING_DETAILS, BookingState.FAILED)
        if self.details is None:
            self._fail_input("Customer details are required.", "fullName")
        if not self.selected:
            self._fail_input("Please select at least one table to reserve.", "tables")

        payload = self._payload()
        self.state = BookingState.SUBMITTING
        try:
            if self.editing:
                order_id = self.client.update_reservation(payload)
            else:
                order_id = self.client.reserve(payload)
        except ConflictError as e:
            logger.info("Booking conflict on %s %s: %s", self.date, self.time, e.tables)
            self.state = BookingState.FAILED
            self.error = e
            self._refresh_after_conflict(e)
            return None
        except BookingError as e:
            logger.warning("Booking failed: %r", e)
            self.state = BookingState.FAILED
            self.error = e
            return None

        self.confirmation = Confirmation(
            order_id=order_id,
            full_name=self.details.full_name,
            phone=self.details.phone,
            email=self.details.email,
            date=self.date,
            time=self.time,
            guests=self.guests,
            tables=tuple(self.selected),
            updated=self.editing,
        )
        self.error = None
        self.state = BookingState.CONFIRMED
        return self.confirmation

    def _refresh_after_conflict(self, e: ConflictError) -> None:
        try:
            self.refresh_availability()
        except BookingError as refresh_error:
            logger.warning("Availability refresh after conflict failed: %r", refresh_error)
            self.reserved |= set(e.tables)
            self.selected = [t for t in self.selected if t not in self.reserved]

    # FAILED

    def back_to_tables(self) -> None:
        self._require(BookingState.ENTERING_DETAILS, BookingState.FAILED)
        if self.state is BookingState.FAILED:
            self.refresh_availability()
        self.error = None
        self.state = BookingState.SELECTING_TABLES


def cancel_booking(client, order_id: str) -> None:
    """Cancels a reservation; unknown ids raise ``NotFoundError``."""
    if not order_id:
        raise ValidationError("Order id is required.", field="orderId")
    client.cancel(order_id)
    logger.info("Cancelled booking %s", order_id)


def booking_history(client, session: UserSession) -> tuple[list[dict], list[dict]]:
    """The user's reservations and takeaway orders, each newest first."""
    history = client.orders_by_phone(session.phone)
    reservations = [h for h in history if h.get("kind") == "reservation"]
    takeaway = [h for h in history if h.get("kind") == "takeaway"]
    return reservations, takeaway
