"""Destinations for extracted points."""

from gadgetbridge_etl.sinks.base import MetricSink
from gadgetbridge_etl.sinks.jsonl import JsonLinesSink
from gadgetbridge_etl.sinks.memory import MemorySink

__all__ = [
    "MetricSink",
    "JsonLinesSink",
    "MemorySink",
]
