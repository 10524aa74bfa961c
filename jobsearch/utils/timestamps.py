"""Timestamp utilities for UTC handling and date display.

This module provides utilities for working with timestamps in UTC:
- Getting current UTC time
- Converting timezone-naive to timezone-aware UTC
- Parsing ISO 8601 datetime strings from fixture files
- Formatting timestamps for logs and short display dates for search
"""

from datetime import datetime, timezone
from typing import Optional

# Fallback date for partial jobs rebuilt from undated index entries
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


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

    Example:
        >>> naive = datetime(2025, 11, 4, 12, 0, 0)
        >>> ensure_utc(naive).tzinfo == timezone.utc
        True
    """
    if dt is None:
        return None

    # If timezone-naive, treat as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: str) -> Optional[datetime]:
    """Parse an ISO 8601 datetime string to UTC datetime.

    Supports:
    - 2025-11-04T12:00:00Z
    - 2025-11-04T12:00:00+00:00
    - 2025-11-04T12:00:00
    - 2025-11-04

    Args:
        iso_string: ISO 8601 formatted datetime string

    Returns:
        Timezone-aware datetime in UTC, or None if parsing fails
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    # fromisoformat on older interpreters rejects the 'Z' suffix
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        try:
            return ensure_utc(datetime.strptime(cleaned, "%Y-%m-%d"))
        except ValueError:
            return None


def format_timestamp(dt: Optional[datetime]) -> str:
    """Format a datetime as ISO 8601 string in UTC with a 'Z' suffix.

    Args:
        dt: Datetime to format

    Returns:
        ISO 8601 formatted string, or an empty string for None

    Example:
        >>> format_timestamp(datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_short_date(dt: Optional[datetime]) -> str:
    """Format a datetime as a short numeric date (M/D/YY) in UTC.

    No zero padding is applied, so November 4th 2025 renders as
    ``11/4/25``. This is the text searched when a query contains a date.

    Args:
        dt: Datetime to format

    Returns:
        Short date string, or an empty string for None
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""
    return f"{dt_utc.month}/{dt_utc.day}/{dt_utc:%y}"
