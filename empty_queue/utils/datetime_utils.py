"""
Timezone-aware datetime utilities.

This module provides utilities for working with timezone-aware datetimes,
day boundaries and date keys, ensuring consistent handling across the
application. Timestamps are stored and compared in UTC; calendar days are
resolved in the schedule timezone.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Union

# UTC timezone constant
UTC = timezone.utc

DATE_KEY_FORMAT = "%Y-%m-%d"


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Naive datetimes (as read back from SQLite) are assumed to be UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert to a naive UTC datetime for storage."""
    if dt is None:
        return None
    return ensure_utc(dt).replace(tzinfo=None)


def day_bounds(day: date, tz: tzinfo = UTC) -> tuple[datetime, datetime]:
    """
    Return the [start, end) UTC bounds of a calendar day in ``tz``.

    The end is the start of the following day, so DST days are 23 or 25 hours.
    """
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def at_minute(day: date, minute: int, tz: tzinfo = UTC) -> datetime:
    """UTC timestamp of wall-clock ``minute`` after local midnight of ``day``."""
    local_midnight = datetime.combine(day, time.min, tzinfo=tz)
    return (local_midnight + timedelta(minutes=minute)).astimezone(UTC)


def local_date(dt: datetime, tz: tzinfo = UTC) -> date:
    """Calendar date of a timestamp in ``tz``."""
    return ensure_utc(dt).astimezone(tz).date()


def to_date_key(value: Union[date, datetime], tz: tzinfo = UTC) -> str:
    """Format a date (or the local date of a timestamp) as YYYY-MM-DD."""
    if isinstance(value, datetime):
        value = local_date(value, tz)
    return value.strftime(DATE_KEY_FORMAT)


def parse_date_key(value: str) -> date:
    """
    Parse a YYYY-MM-DD key.

    Raises:
        ValueError: If the string is not a valid date key
    """
    return datetime.strptime(value, DATE_KEY_FORMAT).date()


def normalize_date_key(value: object) -> Optional[str]:
    """
    Normalize a caller-supplied date key.

    Accepts date/datetime objects, "YYYY-MM-DD" strings and full ISO-8601
    timestamps (the date part is kept as written). Returns None when the value
    cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().strftime(DATE_KEY_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_KEY_FORMAT)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        return parse_date_key(text[:10]).strftime(DATE_KEY_FORMAT)
    except ValueError:
        return None


def minutes_between(origin: datetime, moment: datetime) -> float:
    """Signed minutes from ``origin`` to ``moment``."""
    return (ensure_utc(moment) - ensure_utc(origin)).total_seconds() / 60
