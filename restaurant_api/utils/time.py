import re
from datetime import date, datetime, timezone

# Two-hour service periods, labelled by their start time.
TIME_SLOTS = (
    "09:00 AM",
    "11:00 AM",
    "01:00 PM",
    "03:00 PM",
    "05:00 PM",
    "07:00 PM",
)

_SLOT_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")

def normalize_slot(label: str) -> str:
    """Maps '7:00 pm' style input onto its canonical label, e.g. '07:00 PM'."""
    m = _SLOT_RE.match(label or "")
    if not m:
        raise ValueError(f"Unrecognised time slot {label!r}.")
    hour, minute, meridiem = int(m.group(1)), m.group(2), m.group(3).upper()
    canonical = f"{hour:02d}:{minute} {meridiem}"
    if canonical not in TIME_SLOTS:
        raise ValueError(f"Time slot must be one of: {', '.join(TIME_SLOTS)}.")
    return canonical

def parse_date(s: str) -> date:
    """Parses a YYYY-MM-DD calendar date."""
    return date.fromisoformat(s.strip())

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def to_utc(dt: datetime) -> datetime:
    """Converts a naive datetime to a timezone-aware UTC datetime."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)

def api_iso_z(dt: datetime) -> str:
    """Formats a datetime into an ISO 8601 string ending in 'Z' for API responses."""
    return to_utc(dt).astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
