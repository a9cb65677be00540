"""UTC timestamp helpers for row bookkeeping columns."""

from datetime import datetime, timezone
from typing import Optional

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Example:
        >>> utc_now().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def format_timestamp(dt: Optional[datetime] = None) -> str:
    """Format a UTC datetime as the ISO 8601 string stored in the database.

    Args:
        dt: Datetime to format (defaults to now). Naive values are treated as UTC.

    Returns:
        String such as ``2024-05-01T09:30:00.000000Z``; these sort chronologically
    """
    if dt is None:
        dt = utc_now()
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(TIMESTAMP_FORMAT)
