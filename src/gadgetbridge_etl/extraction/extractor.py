"""Incremental, watermark-driven table extraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import structlog
from sqlalchemy import Select, column, select, table
from sqlalchemy.engine import Connection, CursorResult
from sqlalchemy.exc import SQLAlchemyError

from gadgetbridge_etl.connectors.sqlite import SQLiteConnector
from gadgetbridge_etl.core.exceptions import (
    ExtractionError,
    QueryBuildError,
    ScanError,
    SinkError,
)
from gadgetbridge_etl.extraction.catalog import TableDescriptor
from gadgetbridge_etl.extraction.points import (
    DecodedRow,
    decode_field,
    decode_tag,
    decode_timestamp,
)
from gadgetbridge_etl.extraction.watermark import WatermarkStore
from gadgetbridge_etl.sinks.base import MetricSink

logger = structlog.get_logger()

DATABASE_PATH_TAG = "database_path"


@dataclass
class TableExtraction:
    """Outcome of extracting one table from one source."""

    table: str
    source_path: str
    rows_emitted: int
    previous_watermark: int | None
    new_watermark: int | None
    error: ExtractionError | None = None

    @property
    def is_initial_load(self) -> bool:
        return self.previous_watermark is None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class RowExtractor:
    """
    Extract rows newer than a table's watermark and emit them as points.

    Rows are scanned in ascending timestamp order and the watermark is
    advanced after every emitted row, so a failure part-way through a table
    keeps the progress made on the rows before it.
    """

    def __init__(self) -> None:
        self.logger = logger.bind(component="row_extractor")

    def build_query(self, descriptor: TableDescriptor, watermark: int | None) -> Select:
        """
        Build the scan for ``descriptor``.

        Selects the timestamp column, then tags, then fields; filters on
        ``timestamp > watermark`` when a watermark exists; orders ascending
        by timestamp.

        Raises:
            QueryBuildError: If the statement cannot be constructed
        """
        try:
            ts = column(descriptor.timestamp_column)
            stmt = select(
                ts,
                *(column(name) for name in descriptor.tag_columns),
                *(column(name) for name in descriptor.field_columns),
            ).select_from(table(descriptor.name))

            if watermark is not None:
                stmt = stmt.where(ts > watermark)

            return stmt.order_by(ts.asc())
        except SQLAlchemyError as e:
            raise QueryBuildError(
                f"Failed to build query for table {descriptor.name!r}: {e}",
                table=descriptor.name,
            ) from e

    def extract(
        self,
        connector: SQLiteConnector,
        source_path: str,
        descriptor: TableDescriptor,
        watermarks: WatermarkStore,
        sink: MetricSink,
    ) -> TableExtraction:
        """
        Extract one table incrementally.

        Args:
            connector: Open connector for the source database
            source_path: Source path, attached to every point as a tag
            descriptor: Table layout
            watermarks: Watermark store, advanced per emitted row
            sink: Receives one point per row

        Returns:
            TableExtraction summary

        Raises:
            QueryBuildError: If the scan cannot be built or prepared
            ScanError: If reading or decoding a row fails
            SinkError: If the sink rejects a point
        """
        previous = watermarks.get(descriptor.name)
        stmt = self.build_query(descriptor, previous)
        log = self.logger.bind(table=descriptor.name, source=source_path)

        log.debug(
            "Starting table extraction",
            previous_watermark=previous,
            is_initial=previous is None,
        )

        result = self._execute(connector.connection, stmt, descriptor)

        base_tags = {DATABASE_PATH_TAG: source_path}
        emitted = 0
        try:
            for row in self._iter_rows(result, descriptor):
                decoded = self.decode_row(row, descriptor)
                point = decoded.to_point(descriptor.measurement, base_tags)

                try:
                    sink.add_point(point)
                except Exception as e:
                    raise SinkError(
                        f"Sink rejected point from table {descriptor.name!r}: {e}",
                        table=descriptor.name,
                        details={"timestamp": decoded.timestamp},
                    ) from e

                watermarks.advance(descriptor.name, decoded.timestamp)
                emitted += 1
        except ExtractionError as e:
            e.rows_emitted = emitted
            raise
        finally:
            result.close()
            if emitted:
                log.info(
                    "Table extraction progressed",
                    rows=emitted,
                    watermark=watermarks.get(descriptor.name),
                )

        return TableExtraction(
            table=descriptor.name,
            source_path=source_path,
            rows_emitted=emitted,
            previous_watermark=previous,
            new_watermark=watermarks.get(descriptor.name),
        )

    def decode_row(self, row: Sequence[Any], descriptor: TableDescriptor) -> DecodedRow:
        """
        Decode one result row positionally.

        Raises:
            ScanError: If a value cannot be decoded
        """
        tag_offset = 1
        field_offset = tag_offset + len(descriptor.tag_columns)

        try:
            decoded = DecodedRow(timestamp=decode_timestamp(row[0]))
        except (TypeError, ValueError) as e:
            raise ScanError(
                f"Error scanning row of table {descriptor.name!r}: "
                f"column {descriptor.timestamp_column!r}: {e}",
                table=descriptor.name,
            ) from e

        for i, name in enumerate(descriptor.tag_columns):
            try:
                decoded.tags[name.lower()] = decode_tag(row[tag_offset + i])
            except (TypeError, ValueError) as e:
                raise ScanError(
                    f"Error scanning row of table {descriptor.name!r}: column {name!r}: {e}",
                    table=descriptor.name,
                    details={"timestamp": decoded.timestamp},
                ) from e

        for i, name in enumerate(descriptor.field_columns):
            try:
                decoded.fields[name.lower()] = decode_field(row[field_offset + i])
            except (TypeError, ValueError) as e:
                raise ScanError(
                    f"Error scanning row of table {descriptor.name!r}: column {name!r}: {e}",
                    table=descriptor.name,
                    details={"timestamp": decoded.timestamp},
                ) from e

        return decoded

    def _execute(
        self,
        connection: Connection,
        stmt: Select,
        descriptor: TableDescriptor,
    ) -> CursorResult:
        try:
            return connection.execute(stmt)
        except SQLAlchemyError as e:
            raise QueryBuildError(
                f"Failed to query table {descriptor.name!r}: {e}",
                table=descriptor.name,
            ) from e

    def _iter_rows(self, result: CursorResult, descriptor: TableDescriptor):
        """Yield rows, turning cursor failures into ScanError."""
        while True:
            try:
                row = result.fetchone()
            except SQLAlchemyError as e:
                raise ScanError(
                    f"Error reading rows of table {descriptor.name!r}: {e}",
                    table=descriptor.name,
                ) from e
            if row is None:
                return
            yield row
