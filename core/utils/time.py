"""
Time Utilities

The cache persists its timestamp as RFC3339 text in UTC with second
precision, e.g. "2026-01-01T12:00:00Z". These helpers produce and parse
that format and compute a value's age for the staleness check.
"""

from datetime import datetime, timedelta, timezone

from dateutil import parser as dateparser


RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def current_utc_datetime() -> datetime:
    """
    Get current UTC datetime truncated to whole seconds.

    Returns:
        datetime: Current time as timezone-aware datetime in UTC

    Notes:
        Sub-second precision is dropped so a value written and read back
        compares equal to the original.
    """
    return datetime.now(timezone.utc).replace(microsecond=0)


def to_rfc3339(dt: datetime) -> str:
    """
    Format a datetime as RFC3339 UTC text.

    Args:
        dt: Datetime object (naive values are assumed to be UTC)

    Returns:
        str: e.g. "2026-01-01T12:00:00Z"

    Examples:
        >>> to_rfc3339(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))
        '2026-01-01T12:00:00Z'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(RFC3339_FORMAT)


def parse_rfc3339(value: str) -> datetime:
    """
    Parse RFC3339 text into a timezone-aware UTC datetime.

    Accepts both the "Z" suffix and explicit offsets ("+03:30").

    Raises:
        ValueError: If the text is not a valid RFC3339 timestamp
    """
    dt = dateparser.isoparse(value.strip())
    if dt.tzinfo is None:
        raise ValueError(f"Timestamp has no UTC offset: {value!r}")
    return dt.astimezone(timezone.utc)


def age_of(dt: datetime, now: datetime) -> timedelta:
    """Elapsed time between `dt` and `now` (negative if `dt` is in the future)."""
    return now - dt
