"""JSON lines sink in telegraf's JSON metric layout."""

from __future__ import annotations

import json
import sys
from datetime import datetime
from typing import Mapping, TextIO

from gadgetbridge_etl.extraction.points import DataPoint, Scalar
from gadgetbridge_etl.sinks.base import MetricSink


class JsonLinesSink(MetricSink):
    """
    Write each point as one JSON object per line.

    Output shape::

        {"name": "battery_level", "tags": {...}, "fields": {...}, "timestamp": 1700000000}
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.count = 0

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, Scalar],
        tags: Mapping[str, str],
        timestamp: datetime,
    ) -> None:
        record = DataPoint(
            measurement=measurement,
            tags=dict(tags),
            fields=dict(fields),
            timestamp=timestamp,
        ).to_dict()
        self.stream.write(json.dumps(record, sort_keys=True) + "\n")
        self.count += 1

    def flush(self) -> None:
        self.stream.flush()
