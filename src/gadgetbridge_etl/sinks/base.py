"""Sink interface receiving extracted points."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Mapping

from gadgetbridge_etl.extraction.points import DataPoint, Scalar


class MetricSink(ABC):
    """Receives one call per extracted row."""

    @abstractmethod
    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, Scalar],
        tags: Mapping[str, str],
        timestamp: datetime,
    ) -> None:
        """Accept one measurement point."""
        pass

    def add_point(self, point: DataPoint) -> None:
        self.add_fields(point.measurement, point.fields, point.tags, point.timestamp)

    def flush(self) -> None:
        """Flush buffered output, if any."""
        pass
