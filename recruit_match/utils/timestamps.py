"""Timestamp utilities for UTC handling and storage formatting.

Match rows store their timestamps as ISO 8601 strings with a fixed width so
that ordering by the text column matches chronological order.
"""

from datetime import datetime, timezone
from typing import Optional

STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    If the datetime is timezone-naive, it's treated as UTC.
    If the datetime has a different timezone, it's converted to UTC.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def format_for_storage(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime as a fixed-width ISO 8601 UTC string.

    Args:
        dt: Datetime to format (naive values are treated as UTC)

    Returns:
        String like "2025-11-04T12:00:00.000000Z", or None

    Example:
        >>> from datetime import datetime, timezone
        >>> format_for_storage(datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00.000000Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    return dt_utc.strftime(STORAGE_FORMAT)


def parse_from_storage(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO 8601 string back into an aware UTC datetime.

    Handles values written with and without microseconds, and with or
    without the trailing "Z".

    Args:
        dt_str: Stored timestamp string

    Returns:
        Timezone-aware datetime in UTC, or None for empty input
    """
    if not dt_str:
        return None

    cleaned = dt_str.strip().rstrip("Z")
    try:
        dt = datetime.strptime(cleaned, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(cleaned, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)


def format_timestamp_for_log(dt: Optional[datetime]) -> str:
    """Format a datetime for structured logging and text reports.

    Example:
        >>> from datetime import datetime, timezone
        >>> format_timestamp_for_log(datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")
