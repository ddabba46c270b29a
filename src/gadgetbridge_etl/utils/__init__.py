"""Utility modules for Gadgetbridge ETL."""

from gadgetbridge_etl.utils.logging import setup_logging, get_logger
from gadgetbridge_etl.utils.helpers import format_duration, parse_duration

__all__ = [
    "setup_logging",
    "get_logger",
    "format_duration",
    "parse_duration",
]
