import re
import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from .utils.time import normalize_slot

DEFAULT_MAX_GUESTS = 20

def normalize_phone(value: str) -> str:
    """Strips everything but digits; the result must be exactly 10 digits."""
    digits = re.sub(r"\D", "", value or "")
    if len(digits) != 10:
        raise ValueError("Phone number must be exactly 10 digits.")
    return digits


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)


class ReservationRequest(_Request):
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=120)
    phone: str
    email: EmailStr
    date: datetime.date
    time: str
    guests: int = Field(..., gt=0)
    tables: list[str] = Field(..., min_length=1)
    user_id: str | None = Field(None, alias="userId", max_length=64)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str):
        return normalize_phone(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str):
        return v.lower()

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: datetime.date):
        if v < datetime.date.today():
            raise ValueError("Reservation date cannot be in the past.")
        return v

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str):
        return normalize_slot(v)

    @field_validator("guests")
    @classmethod
    def validate_guests(cls, v: int, info: ValidationInfo):
        limit = (info.context or {}).get("max_guests", DEFAULT_MAX_GUESTS)
        if v > limit:
            raise ValueError(f"At most {limit} guests per reservation.")
        return v

    @field_validator("tables")
    @classmethod
    def validate_tables(cls, v: list[str]):
        if any(not t for t in v):
            raise ValueError("Table identifiers must be non-empty.")
        if len(set(v)) != len(v):
            raise ValueError("Each table may only be selected once.")
        return v


class UpdateReservationRequest(ReservationRequest):
    order_id: str = Field(..., alias="orderId", min_length=1, max_length=32)


class TakeawayItem(_Request):
    name: str = Field(..., min_length=1, max_length=120)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)


class TakeawayRequest(_Request):
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=120)
    phone: str
    address: str = Field(..., min_length=1, max_length=500)
    items: list[TakeawayItem] = Field(..., min_length=1)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str):
        return normalize_phone(v)
