"""Run one extraction cycle across every source and table."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

import structlog

from gadgetbridge_etl.connectors.manager import ConnectionManager
from gadgetbridge_etl.core.exceptions import (
    ExtractionError,
    GatherError,
    StorageCloseError,
    StorageOpenError,
)
from gadgetbridge_etl.core.utils import utc_now
from gadgetbridge_etl.extraction.catalog import SchemaCatalog
from gadgetbridge_etl.extraction.extractor import RowExtractor, TableExtraction
from gadgetbridge_etl.extraction.watermark import WatermarkStore
from gadgetbridge_etl.sinks.base import MetricSink

logger = structlog.get_logger()


@dataclass
class CycleResult:
    """Result of one extraction cycle."""

    started_at: datetime
    finished_at: datetime | None = None
    tables: list[TableExtraction] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)

    @property
    def points_emitted(self) -> int:
        return sum(t.rows_emitted for t in self.tables)

    @property
    def succeeded(self) -> bool:
        return not self.errors

    @property
    def error(self) -> GatherError | None:
        """All recorded failures joined into one error, or None."""
        if not self.errors:
            return None
        return GatherError(self.errors)

    def raise_for_errors(self) -> None:
        """Raise the aggregate error if anything failed."""
        error = self.error
        if error is not None:
            raise error


class ExtractionOrchestrator:
    """
    Drive RowExtractor over every source and every catalog table.

    Sources and tables are processed strictly in sequence. A source that
    cannot be opened or a table that fails is recorded and skipped; the
    cycle always visits everything else.
    """

    def __init__(
        self,
        connections: ConnectionManager | None = None,
        extractor: RowExtractor | None = None,
    ) -> None:
        self.connections = connections or ConnectionManager()
        self.extractor = extractor or RowExtractor()
        self.logger = logger.bind(component="orchestrator")

    def gather(
        self,
        sources: Iterable[str],
        catalog: SchemaCatalog,
        watermarks: WatermarkStore,
        sink: MetricSink,
    ) -> CycleResult:
        """
        Run one cycle.

        Args:
            sources: Database paths, visited in order
            catalog: Tables to extract from each source
            watermarks: Resume points, advanced in place
            sink: Receives every emitted point

        Returns:
            CycleResult; ``result.error`` aggregates any failures
        """
        result = CycleResult(started_at=utc_now())

        for path in sources:
            try:
                connector = self.connections.open(path)
            except StorageOpenError as e:
                self._record(result, e, source=path)
                continue

            try:
                for descriptor in catalog:
                    previous = watermarks.get(descriptor.name)
                    try:
                        result.tables.append(
                            self.extractor.extract(
                                connector, path, descriptor, watermarks, sink
                            )
                        )
                    except ExtractionError as e:
                        # Rows delivered before the failure still count
                        result.tables.append(
                            TableExtraction(
                                table=descriptor.name,
                                source_path=path,
                                rows_emitted=e.rows_emitted,
                                previous_watermark=previous,
                                new_watermark=watermarks.get(descriptor.name),
                                error=e,
                            )
                        )
                        self._record(result, e, source=path, table=descriptor.name)
            finally:
                try:
                    self.connections.close(connector)
                except StorageCloseError as e:
                    self._record(result, e, source=path)

        result.finished_at = utc_now()
        self.logger.info(
            "Extraction cycle finished",
            points=result.points_emitted,
            errors=len(result.errors),
        )
        return result

    def _record(
        self,
        result: CycleResult,
        error: Exception,
        source: str,
        table: str | None = None,
    ) -> None:
        result.errors.append(error)
        self.logger.warning(
            "Extraction failure recorded",
            source=source,
            table=table,
            error=str(error),
        )
