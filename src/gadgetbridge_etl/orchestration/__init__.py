"""Cycle scheduling."""

from gadgetbridge_etl.orchestration.scheduler import (
    IntervalScheduler,
    JobExecution,
    JobStatus,
)

__all__ = [
    "IntervalScheduler",
    "JobExecution",
    "JobStatus",
]
