
import uuid
from sqlalchemy import UniqueConstraint, func
from .extensions import db
from .utils.time import utcnow, api_iso_z

def new_order_id() -> str:
    return uuid.uuid4().hex

class Table(db.Model):
    __tablename__ = "tables"
    id = db.Column(db.Integer, primary_key=True)
    identifier = db.Column(db.String(32), nullable=False, unique=True)
    number = db.Column(db.Integer, nullable=False, unique=True)

    def to_dict(self):
        return {"id": self.identifier, "number": self.number}

class Reservation(db.Model):
    __tablename__ = "reservations"
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(32), nullable=False, unique=True, index=True, default=new_order_id)
    full_name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(10), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False)
    date = db.Column(db.Date, nullable=False)
    time_slot = db.Column(db.String(8), nullable=False)
    guests = db.Column(db.Integer, nullable=False)
    owner_user_id = db.Column(db.String(64))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    tables = db.relationship(
        "ReservationTable",
        back_populates="reservation",
        cascade="all, delete-orphan",
        order_by="ReservationTable.id",
    )

    __table_args__ = (
        db.Index("ix_reservations_date_slot", "date", "time_slot"),
    )

    @property
    def table_ids(self) -> list[str]:
        return [t.table_id for t in self.tables]

    def to_dict(self):
        return {
            "orderId": self.order_id,
            "fullName": self.full_name,
            "phone": self.phone,
            "email": self.email,
            "date": self.date.isoformat(),
            "time": self.time_slot,
            "guests": self.guests,
            "tables": self.table_ids,
            "userId": self.owner_user_id,
            "createdAt": api_iso_z(self.created_at) if self.created_at else None,
        }

class ReservationTable(db.Model):
    """One table held by a reservation. Date and slot are copied here so the
    unique constraint can forbid double booking at the storage layer."""

    __tablename__ = "reservation_tables"
    id = db.Column(db.Integer, primary_key=True)
    reservation_id = db.Column(db.Integer, db.ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    time_slot = db.Column(db.String(8), nullable=False)
    table_id = db.Column(db.String(32), db.ForeignKey("tables.identifier"), nullable=False)

    reservation = db.relationship("Reservation", back_populates="tables")

    __table_args__ = (
        UniqueConstraint("date", "time_slot", "table_id", name="uq_reservation_slot_table"),
    )

class TakeawayOrder(db.Model):
    __tablename__ = "takeaway_orders"
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(32), nullable=False, unique=True, index=True, default=new_order_id)
    full_name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(10), nullable=False, index=True)
    address = db.Column(db.String(500), nullable=False)
    items = db.Column(db.JSON, nullable=False)
    subtotal = db.Column(db.Numeric(10, 2), nullable=False)
    tax = db.Column(db.Numeric(10, 2), nullable=False)
    ac_tax = db.Column(db.Numeric(10, 2), nullable=False)
    gst = db.Column(db.Numeric(10, 2), nullable=False)
    delivery_charge = db.Column(db.Numeric(10, 2), nullable=False)
    total = db.Column(db.Numeric(10, 2), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    def to_dict(self):
        return {
            "orderId": self.order_id,
            "fullName": self.full_name,
            "phone": self.phone,
            "address": self.address,
            "items": self.items,
            "subtotal": float(self.subtotal),
            "tax": float(self.tax),
            "acTax": float(self.ac_tax),
            "gst": float(self.gst),
            "deliveryCharge": float(self.delivery_charge),
            "total": float(self.total),
            "createdAt": api_iso_z(self.created_at) if self.created_at else None,
        }
