"""Ingest pipeline: the host-facing entry point for extraction cycles."""

from __future__ import annotations

import threading
from typing import Any, Iterable, Mapping

import structlog
from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError

from gadgetbridge_etl.connectors.manager import ConnectionManager
from gadgetbridge_etl.core.config import Settings
from gadgetbridge_etl.core.exceptions import InvalidStateError, SinkError
from gadgetbridge_etl.extraction.catalog import BUILTIN_TABLES, SchemaCatalog
from gadgetbridge_etl.extraction.orchestrator import CycleResult, ExtractionOrchestrator
from gadgetbridge_etl.extraction.watermark import WatermarkStore
from gadgetbridge_etl.sinks.base import MetricSink
from gadgetbridge_etl.utils.logging import (
    clear_cycle_id,
    log_execution_time,
    new_cycle_id,
)

logger = structlog.get_logger()

STATE_KEY = "last_table_times"


class PersistedState(BaseModel):
    """Shape of the durable state payload."""

    model_config = ConfigDict(extra="forbid")

    last_table_times: dict[str, StrictInt]


class IngestPipeline:
    """
    Owns the catalog, the watermark state and the cycle lock.

    One lock guards everything: a cycle started while another is running
    blocks until the first completes, and state export/import wait for
    any in-flight cycle.
    """

    def __init__(
        self,
        database_paths: Iterable[str],
        catalog: SchemaCatalog,
        orchestrator: ExtractionOrchestrator | None = None,
        watermarks: WatermarkStore | None = None,
    ) -> None:
        self.database_paths = list(database_paths)
        self.catalog = catalog
        self.orchestrator = orchestrator or ExtractionOrchestrator()
        self._watermarks = watermarks or WatermarkStore()
        self._lock = threading.Lock()
        self.logger = logger.bind(component="pipeline")

    @log_execution_time(message="Extraction cycle completed")
    def gather(self, sink: MetricSink) -> CycleResult:
        """
        Run one extraction cycle into ``sink``.

        Returns:
            CycleResult; failures are reported through ``result.error``
            rather than raised
        """
        with self._lock:
            cycle_id = new_cycle_id()
            try:
                self.logger.debug(
                    "Starting extraction cycle",
                    cycle_id=cycle_id,
                    sources=len(self.database_paths),
                    tables=len(self.catalog),
                )
                result = self.orchestrator.gather(
                    self.database_paths,
                    self.catalog,
                    self._watermarks,
                    sink,
                )
                self._flush(sink, result)
                return result
            finally:
                clear_cycle_id()

    def _flush(self, sink: MetricSink, result: CycleResult) -> None:
        """Flush the sink, recording a failure on the cycle result."""
        try:
            sink.flush()
        except Exception as e:
            result.errors.append(SinkError(f"Failed to flush sink: {e}"))
            self.logger.warning("Sink flush failed", error=str(e))

    def export_state(self) -> dict[str, dict[str, int]]:
        """Durable state: ``{"last_table_times": {table: timestamp}}``."""
        with self._lock:
            return {STATE_KEY: self._watermarks.snapshot()}

    def import_state(self, state: Mapping[str, Any] | None) -> None:
        """
        Replace the watermark state.

        Args:
            state: Payload from :meth:`export_state`, or None to start fresh

        Raises:
            InvalidStateError: If ``state`` has any other shape; the current
                state is left untouched
        """
        if state is None:
            snapshot: dict[str, int] | None = None
        else:
            if not isinstance(state, Mapping):
                raise InvalidStateError(
                    f"Invalid state type: {type(state).__name__}",
                )
            try:
                snapshot = PersistedState.model_validate(dict(state)).last_table_times
            except ValidationError as e:
                raise InvalidStateError(
                    f"Invalid state payload: {e}",
                    details={"keys": sorted(str(k) for k in state.keys())},
                ) from e

        with self._lock:
            self._watermarks.restore(snapshot)

        self.logger.info(
            "Imported state",
            tables=0 if snapshot is None else len(snapshot),
        )


def create_pipeline(
    settings: Settings,
    connections: ConnectionManager | None = None,
) -> IngestPipeline:
    """
    Build a pipeline from settings.

    Args:
        settings: Application settings
        connections: Override the connection manager

    Returns:
        IngestPipeline with the built-in tables followed by the configured
        extra tables
    """
    catalog = SchemaCatalog.merge(BUILTIN_TABLES, settings.catalog.extra_tables)
    return IngestPipeline(
        database_paths=settings.sources.database_paths,
        catalog=catalog,
        orchestrator=ExtractionOrchestrator(connections=connections),
    )
