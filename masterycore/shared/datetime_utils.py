"""Timezone-aware datetime utilities.

This module provides consistent timezone handling across the application.
All datetime values should use UTC timezone for storage and comparison.
"""

from datetime import date, datetime, timedelta, timezone

from masterycore.shared.constants import MS_PER_DAY


def utc_now() -> datetime:
    """Get current datetime with UTC timezone.

    Always use this function instead of datetime.utcnow() or datetime.now().

    Returns:
        Current datetime with UTC timezone
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure datetime has UTC timezone.

    If datetime is naive (no timezone), assumes UTC and adds it.
    If datetime has different timezone, converts to UTC.

    Args:
        dt: Datetime to ensure is UTC

    Returns:
        Datetime with UTC timezone, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume it's UTC and add timezone
        return dt.replace(tzinfo=timezone.utc)

    # Convert to UTC if different timezone
    return dt.astimezone(timezone.utc)


def days_between(start: datetime, end: datetime) -> float:
    """Fractional days from start to end (negative if end is earlier)."""
    return (ensure_utc(end) - ensure_utc(start)) / timedelta(days=1)


def add_days(dt: datetime, days: float) -> datetime:
    """Shift a datetime by a fractional number of days, at millisecond precision."""
    return ensure_utc(dt) + timedelta(milliseconds=round(days * MS_PER_DAY))


def datetime_to_ms(dt: datetime) -> int:
    """Convert datetime to epoch milliseconds."""
    return int(ensure_utc(dt).timestamp() * 1000)


def ms_to_datetime(ms: int | float) -> datetime:
    """Convert epoch milliseconds to a UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def utc_date(dt: datetime) -> date:
    """Calendar date of a datetime in UTC."""
    return ensure_utc(dt).date()
