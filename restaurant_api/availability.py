from datetime import date
from sqlalchemy import select
from .extensions import db
from .errors import ValidationError
from .models import Reservation, ReservationTable
from .utils.time import normalize_slot


def get_reserved_tables(day: date | None, time_slot: str | None, exclude_order_id: str | None = None) -> set[str]:
    """
    Table identifiers held by reservations for exactly this date and slot.

    Tables held by ``exclude_order_id`` are left out, so a reservation being
    edited does not see its own tables as taken.
    """
    if not day:
        raise ValidationError("Date is required.", field="date")
    if not time_slot:
        raise ValidationError("Time slot is required.", field="time")
    try:
        slot = normalize_slot(time_slot)
    except ValueError as e:
        raise ValidationError(str(e), field="time") from e

    stmt = (
        select(ReservationTable.table_id)
        .join(Reservation, ReservationTable.reservation_id == Reservation.id)
        .where(ReservationTable.date == day, ReservationTable.time_slot == slot)
    )
    if exclude_order_id:
        stmt = stmt.where(Reservation.order_id != exclude_order_id)
    return set(db.session.execute(stmt).scalars())
