"""Incremental extraction: catalog, watermarks, row extraction and cycles."""

from gadgetbridge_etl.extraction.catalog import (
    BUILTIN_TABLES,
    SchemaCatalog,
    TableDescriptor,
)
from gadgetbridge_etl.extraction.extractor import RowExtractor, TableExtraction
from gadgetbridge_etl.extraction.orchestrator import CycleResult, ExtractionOrchestrator
from gadgetbridge_etl.extraction.points import DataPoint, Scalar, ScalarKind
from gadgetbridge_etl.extraction.watermark import WatermarkSnapshot, WatermarkStore

__all__ = [
    "BUILTIN_TABLES",
    "SchemaCatalog",
    "TableDescriptor",
    "RowExtractor",
    "TableExtraction",
    "CycleResult",
    "ExtractionOrchestrator",
    "DataPoint",
    "Scalar",
    "ScalarKind",
    "WatermarkSnapshot",
    "WatermarkStore",
]
