"""
Gadgetbridge ETL - incremental metrics extraction from Gadgetbridge databases

Reads newly appended rows from Gadgetbridge's SQLite auto-export files and
turns them into tagged measurement points, tracking a per-table watermark
so every row is emitted once across restarts.
"""

__version__ = "0.1.0"

from gadgetbridge_etl.core.config import Settings, get_settings
from gadgetbridge_etl.core.pipeline import IngestPipeline, create_pipeline
from gadgetbridge_etl.core.exceptions import (
    GadgetbridgeETLError,
    ConfigurationError,
    StorageOpenError,
    StorageCloseError,
    ExtractionError,
    QueryBuildError,
    ScanError,
    InvalidStateError,
    GatherError,
)
from gadgetbridge_etl.extraction import (
    BUILTIN_TABLES,
    CycleResult,
    DataPoint,
    SchemaCatalog,
    TableDescriptor,
    WatermarkStore,
)
from gadgetbridge_etl.sinks import JsonLinesSink, MemorySink, MetricSink

__all__ = [
    # Version
    "__version__",
    # Configuration
    "Settings",
    "get_settings",
    # Pipeline
    "IngestPipeline",
    "create_pipeline",
    "CycleResult",
    # Catalog and state
    "BUILTIN_TABLES",
    "SchemaCatalog",
    "TableDescriptor",
    "WatermarkStore",
    # Sinks
    "DataPoint",
    "MetricSink",
    "JsonLinesSink",
    "MemorySink",
    # Exceptions
    "GadgetbridgeETLError",
    "ConfigurationError",
    "StorageOpenError",
    "StorageCloseError",
    "ExtractionError",
    "QueryBuildError",
    "ScanError",
    "InvalidStateError",
    "GatherError",
]
