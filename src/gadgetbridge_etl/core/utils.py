"""Core utilities for Gadgetbridge ETL."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current UTC time as timezone-aware datetime.

    Returns:
        datetime: Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def from_unix_seconds(seconds: int) -> datetime:
    """
    Convert integer epoch seconds to a timezone-aware UTC datetime.

    Args:
        seconds: Seconds since the Unix epoch

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def to_unix_seconds(dt: datetime) -> int:
    """Convert a datetime back to integer epoch seconds (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


__all__ = [
    "utc_now",
    "from_unix_seconds",
    "to_unix_seconds",
]
