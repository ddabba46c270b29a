"""Core module for Gadgetbridge ETL."""

from gadgetbridge_etl.core.config import Settings, get_settings
from gadgetbridge_etl.core.exceptions import (
    GadgetbridgeETLError,
    ConfigurationError,
    StorageError,
    StorageOpenError,
    StorageCloseError,
    ExtractionError,
    QueryBuildError,
    ScanError,
    SinkError,
    InvalidStateError,
    GatherError,
)

__all__ = [
    "Settings",
    "get_settings",
    "GadgetbridgeETLError",
    "ConfigurationError",
    "StorageError",
    "StorageOpenError",
    "StorageCloseError",
    "ExtractionError",
    "QueryBuildError",
    "ScanError",
    "SinkError",
    "InvalidStateError",
    "GatherError",
]
