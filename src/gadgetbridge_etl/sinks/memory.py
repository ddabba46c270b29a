"""In-memory sink."""

from __future__ import annotations

from datetime import datetime
from typing import Mapping

from gadgetbridge_etl.extraction.points import DataPoint, Scalar
from gadgetbridge_etl.sinks.base import MetricSink


class MemorySink(MetricSink):
    """Collects points in a list, in arrival order."""

    def __init__(self) -> None:
        self.points: list[DataPoint] = []

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, Scalar],
        tags: Mapping[str, str],
        timestamp: datetime,
    ) -> None:
        self.points.append(
            DataPoint(
                measurement=measurement,
                tags=dict(tags),
                fields=dict(fields),
                timestamp=timestamp,
            )
        )

    def by_measurement(self, measurement: str) -> list[DataPoint]:
        return [p for p in self.points if p.measurement == measurement]

    def clear(self) -> None:
        self.points.clear()

    def __len__(self) -> int:
        return len(self.points)
