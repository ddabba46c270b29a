"""Helper utilities for Gadgetbridge ETL."""

from __future__ import annotations

import re
from datetime import timedelta

_UNIT_ALIASES = {
    "s": "seconds",
    "sec": "seconds",
    "second": "seconds",
    "m": "minutes",
    "min": "minutes",
    "minute": "minutes",
    "h": "hours",
    "hour": "hours",
    "d": "days",
    "day": "days",
    "w": "weeks",
    "week": "weeks",
}


def parse_duration(duration_str: str) -> timedelta:
    """
    Parse a duration string to timedelta.

    Examples:
        parse_duration("1 hour") -> timedelta(hours=1)
        parse_duration("30 minutes") -> timedelta(minutes=30)
        parse_duration("5m") -> timedelta(minutes=5)
        parse_duration("90s") -> timedelta(seconds=90)
    """
    pattern = r"^(\d+)\s*([a-z]+?)s?$"
    match = re.match(pattern, duration_str.lower().strip())

    if not match:
        raise ValueError(f"Invalid duration format: {duration_str}")

    value = int(match.group(1))
    unit = match.group(2)

    if unit not in _UNIT_ALIASES:
        raise ValueError(f"Unknown duration unit in: {duration_str}")

    return timedelta(**{_UNIT_ALIASES[unit]: value})


def format_duration(delta: timedelta) -> str:
    """
    Format a timedelta with the largest whole unit.

    Examples:
        format_duration(timedelta(minutes=5)) -> "5m"
        format_duration(timedelta(seconds=90)) -> "90s"
    """
    seconds = int(delta.total_seconds())
    for suffix, size in (("d", 86400), ("h", 3600), ("m", 60)):
        if seconds and seconds % size == 0:
            return f"{seconds // size}{suffix}"
    return f"{seconds}s"
