"""
UTC-first datetime utilities for Hospital Service API.

- All datetimes are stored and processed in UTC
- ISO 8601 strings with 'Z' suffix are used for storage and responses
- Calendar dates (appointments, leave ranges) are stored as YYYY-MM-DD

Usage:
    from core.datetime_utils import utc_now, format_iso, parse_date

    now_str = format_iso(utc_now())          # "2024-01-15T05:00:00Z"
    day = parse_date("2024-01-15T10:30:00Z")    # date(2024, 1, 15)
"""
from datetime import date, datetime, timezone
from typing import Union


def utc_now() -> datetime:
    """Get current datetime in UTC with timezone info."""
    return datetime.now(timezone.utc)


def today_utc() -> date:
    """Get the current calendar date in UTC."""
    return utc_now().date()


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If datetime is naive (no timezone), assumes it's already UTC
    - If datetime has timezone, converts to UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string with UTC timezone.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00Z'
    """
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def now_iso() -> str:
    """Current UTC time as an ISO 8601 storage string."""
    return format_iso(utc_now())


def format_date(value: date) -> str:
    """Format a calendar date as YYYY-MM-DD for storage."""
    return value.isoformat()


def parse_date(value: Union[str, date]) -> date:
    """Parse a YYYY-MM-DD string (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])
