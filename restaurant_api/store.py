"""
Reservation and takeaway persistence.

All writes go through this module. Table double booking is prevented by the
``uq_reservation_slot_table`` constraint on ``reservation_tables``; the
pre-check below only exists to name the colliding tables before the write
is attempted. A concurrent writer that slips past the pre-check still
fails at commit and is reported as a ``ConflictError``.
"""
import logging
from datetime import date, datetime, timezone
from sqlalchemy import case, select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from .availability import get_reserved_tables
from .billing import compute_bill
from .errors import ConflictError, NotFoundError, StoreError, ValidationError
from .extensions import db
from .models import Reservation, ReservationTable, Table, TakeawayOrder
from .schemas import ReservationRequest, TakeawayRequest, UpdateReservationRequest, normalize_phone
from .utils.time import TIME_SLOTS, to_utc

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)
_SLOT_ORDER = case({slot: i for i, slot in enumerate(TIME_SLOTS)}, value=Reservation.time_slot)


def list_tables() -> list[Table]:
    return db.session.execute(select(Table).order_by(Table.number)).scalars().all()


def provision_tables(count: int) -> int:
    """Creates tables T1..T<count> that do not exist yet. Returns how many were added."""
    existing = set(db.session.execute(select(Table.number)).scalars())
    added = [Table(identifier=f"T{n}", number=n) for n in range(1, count + 1) if n not in existing]
    db.session.add_all(added)
    _commit()
    return len(added)


def _ensure_known_tables(table_ids: list[str]) -> None:
    known = set(db.session.execute(
        select(Table.identifier).where(Table.identifier.in_(table_ids))
    ).scalars())
    unknown = [t for t in table_ids if t not in known]
    if unknown:
        raise ValidationError(f"Unknown tables: {', '.join(unknown)}.", field="tables")


def _ensure_free(data: ReservationRequest, exclude_order_id: str | None = None) -> None:
    taken = get_reserved_tables(data.date, data.time, exclude_order_id) & set(data.tables)
    if taken:
        logger.info("Conflict on %s %s: requested %s, taken %s", data.date, data.time, data.tables, sorted(taken))
        raise ConflictError("Some selected tables are already reserved for this slot.", tables=taken)


def _commit(data: ReservationRequest | None = None, exclude_order_id: str | None = None) -> None:
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if data is None:
            logger.exception("Integrity failure on commit")
            raise StoreError("Could not save changes.") from e
        taken = get_reserved_tables(data.date, data.time, exclude_order_id) & set(data.tables)
        logger.warning("Lost booking race on %s %s for %s", data.date, data.time, sorted(taken))
        raise ConflictError("Just booked by someone else. Pick other tables.", tables=taken) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Store write failed")
        raise StoreError("Could not save changes.") from e


def _holds(data: ReservationRequest) -> list[ReservationTable]:
    return [ReservationTable(date=data.date, time_slot=data.time, table_id=t) for t in data.tables]


def create_reservation(data: ReservationRequest) -> Reservation:
    _ensure_known_tables(data.tables)
    _ensure_free(data)

    res = Reservation(
        full_name=data.full_name,
        phone=data.phone,
        email=data.email,
        date=data.date,
        time_slot=data.time,
        guests=data.guests,
        owner_user_id=data.user_id,
    )
    res.tables = _holds(data)
    db.session.add(res)
    _commit(data)

    logger.info("Reservation %s created for %s %s tables=%s", res.order_id, data.date, data.time, data.tables)
    return res


def get_reservation(order_id: str) -> Reservation:
    res = db.session.execute(
        select(Reservation).where(Reservation.order_id == order_id)
    ).scalar_one_or_none()
    if res is None:
        raise NotFoundError("Reservation not found.")
    return res


def update_reservation(data: UpdateReservationRequest) -> Reservation:
    """Replaces every field of an existing reservation in place; the order id is kept."""
    res = get_reservation(data.order_id)
    _ensure_known_tables(data.tables)
    _ensure_free(data, exclude_order_id=data.order_id)

    res.full_name = data.full_name
    res.phone = data.phone
    res.email = data.email
    res.date = data.date
    res.time_slot = data.time
    res.guests = data.guests
    if data.user_id is not None:
        res.owner_user_id = data.user_id

    # Old holds must be gone before the new ones are inserted, otherwise
    # keeping a table trips the unique constraint within the same flush.
    res.tables.clear()
    try:
        db.session.flush()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Store write failed")
        raise StoreError("Could not save changes.") from e
    res.tables.extend(_holds(data))
    _commit(data, exclude_order_id=data.order_id)

    logger.info("Reservation %s updated to %s %s tables=%s", res.order_id, data.date, data.time, data.tables)
    return res


def cancel_reservation(order_id: str) -> None:
    res = get_reservation(order_id)
    db.session.delete(res)
    _commit()
    logger.info("Reservation %s cancelled", order_id)


def cancel_order(order_id: str) -> str:
    """Cancels a reservation, or failing that a takeaway order, with this id."""
    try:
        cancel_reservation(order_id)
        return "reservation"
    except NotFoundError:
        pass
    order = get_takeaway(order_id)
    db.session.delete(order)
    _commit()
    logger.info("Takeaway order %s cancelled", order_id)
    return "takeaway"


def create_takeaway(data: TakeawayRequest) -> TakeawayOrder:
    bill = compute_bill(data.items)
    order = TakeawayOrder(
        full_name=data.full_name,
        phone=data.phone,
        address=data.address,
        items=[
            {"name": i.name, "quantity": i.quantity, "price": float(i.price)}
            for i in data.items
        ],
        subtotal=bill.subtotal,
        tax=bill.tax,
        ac_tax=bill.ac_tax,
        gst=bill.gst,
        delivery_charge=bill.delivery_charge,
        total=bill.total,
    )
    db.session.add(order)
    _commit()
    logger.info("Takeaway order %s placed, total=%s", order.order_id, bill.total)
    return order


def get_takeaway(order_id: str) -> TakeawayOrder:
    order = db.session.execute(
        select(TakeawayOrder).where(TakeawayOrder.order_id == order_id)
    ).scalar_one_or_none()
    if order is None:
        raise NotFoundError("Order not found.")
    return order


def _newest_first(records: list[tuple[datetime | None, dict]]) -> list[dict]:
    """Bodies of (created_at, body) pairs, newest first; a missing created_at sorts as oldest."""
    records = sorted(records, key=lambda r: to_utc(r[0]) if r[0] else _OLDEST, reverse=True)
    return [body for _, body in records]


def orders_by_phone(phone: str | None) -> list[dict]:
    """Reservations and takeaway orders for a phone number, newest first."""
    if not phone:
        raise ValidationError("Phone number is required.", field="phone")
    try:
        phone = normalize_phone(phone)
    except ValueError as e:
        raise ValidationError(str(e), field="phone") from e

    records = []
    for res in db.session.execute(select(Reservation).where(Reservation.phone == phone)).scalars():
        records.append((res.created_at, dict(res.to_dict(), kind="reservation")))
    for order in db.session.execute(select(TakeawayOrder).where(TakeawayOrder.phone == phone)).scalars():
        records.append((order.created_at, dict(order.to_dict(), kind="takeaway")))

    return _newest_first(records)


def reservations_for_day(day: date, page: int, page_size: int) -> tuple[int, list[Reservation]]:
    base = select(Reservation).where(Reservation.date == day)
    total = db.session.execute(select(func.count()).select_from(base.subquery())).scalar_one()
    rows = db.session.execute(
        base.order_by(_SLOT_ORDER, Reservation.created_at.asc())
        .limit(page_size)
        .offset((page - 1) * page_size)
    ).scalars().all()
    return total, rows


def takeaway_page(page: int, page_size: int) -> tuple[int, list[TakeawayOrder]]:
    total = db.session.execute(select(func.count()).select_from(TakeawayOrder)).scalar_one()
    rows = db.session.execute(
        select(TakeawayOrder)
        .order_by(TakeawayOrder.created_at.desc())
        .limit(page_size)
        .offset((page - 1) * page_size)
    ).scalars().all()
    return total, rows
