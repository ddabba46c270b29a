"""Interval scheduler that triggers extraction cycles."""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable

import structlog

from gadgetbridge_etl.core.utils import utc_now
from gadgetbridge_etl.utils.helpers import format_duration

logger = structlog.get_logger()


class JobStatus(Enum):
    """Job execution status."""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class JobExecution:
    """Record of a job execution."""
    execution_id: str
    started_at: datetime
    ended_at: datetime | None = None
    status: JobStatus = JobStatus.RUNNING
    result: Any = None
    error: str | None = None
    duration_ms: int | None = None


class IntervalScheduler:
    """
    Run a job at a fixed interval, one execution at a time.

    The interval is measured from the start of one run to the start of the
    next; a run that overruns delays the next one instead of overlapping
    it. Failures are logged and the loop keeps going.
    """

    def __init__(
        self,
        func: Callable[[], Any],
        interval: timedelta,
        name: str = "gather",
        history_size: int = 100,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            func: Function to execute each tick
            interval: Time between run starts
            name: Job name used in logs
            history_size: Number of executions kept in ``executions``
        """
        if interval.total_seconds() <= 0:
            raise ValueError("interval must be positive")

        self.func = func
        self.interval = interval
        self.name = name
        self.history_size = history_size
        self.executions: list[JobExecution] = []
        self._stop = threading.Event()
        self._run_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self.logger = logger.bind(component="scheduler", job=name)

    def run_once(self) -> JobExecution:
        """Execute the job now and record the execution."""
        with self._run_lock:
            execution = JobExecution(
                execution_id=str(uuid.uuid4()),
                started_at=utc_now(),
            )
            self.executions.append(execution)
            del self.executions[: -self.history_size]

            start = time.perf_counter()
            try:
                execution.result = self.func()
                execution.status = JobStatus.SUCCESS
                self.logger.debug("Job completed", execution_id=execution.execution_id)
            except Exception as e:
                execution.status = JobStatus.FAILED
                execution.error = str(e)
                self.logger.error(
                    "Job failed",
                    execution_id=execution.execution_id,
                    error=str(e),
                )
            finally:
                execution.ended_at = utc_now()
                execution.duration_ms = int((time.perf_counter() - start) * 1000)

            return execution

    def run_forever(self) -> None:
        """Run until :meth:`stop` is called."""
        self._stop.clear()
        self.logger.info("Scheduler started", interval=format_duration(self.interval))

        while not self._stop.is_set():
            started = time.monotonic()
            self.run_once()
            remaining = self.interval.total_seconds() - (time.monotonic() - started)
            if remaining > 0:
                self._stop.wait(remaining)

        self.logger.info("Scheduler stopped")

    def start(self) -> None:
        """Run the loop in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self.run_forever, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop the loop and wait for the current run to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def last_execution(self) -> JobExecution | None:
        return self.executions[-1] if self.executions else None
