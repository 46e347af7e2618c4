"""Instant parsing and day arithmetic. All instants are normalised to UTC."""
import math
from datetime import datetime, date, time

import pytz

from carhire.exceptions import ValidationError

UTC = pytz.utc
SECONDS_PER_DAY = 24 * 60 * 60


def utcnow() -> datetime:
    """Wrapper for easier testing/mocking."""
    return datetime.now(UTC)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones."""
    if dt.tzinfo is None:
        return UTC.localize(dt)
    return dt.astimezone(UTC)


def parse_instant(value, field: str = "date") -> datetime:
    """
    Parse a rental boundary into an aware UTC datetime.
    Supports:
      - datetime / date objects
      - 'YYYY-MM-DD' (midnight UTC)
      - 'YYYY-MM-DDTHH:MM[:SS]' with optional 'Z' or '+HH:MM' offset
    Raises ValidationError on anything else.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return UTC.localize(datetime.combine(value, time.min))
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid {field}: expected an ISO-8601 date")

    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(s))
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid {field}: {value!r}") from None


def ceil_days(start: datetime, end: datetime) -> int:
    """Elapsed time between two instants, rounded up to whole days."""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def to_iso(value) -> str | None:
    """Render a datetime as an ISO string in UTC; pass other values through."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value
