"""Logging configuration for Gadgetbridge ETL.

Provides structured logging with:
- JSON and console renderers
- Cycle correlation through context variables
- Performance timing

Log output goes to stderr; stdout is reserved for emitted points.
"""

from __future__ import annotations

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from functools import wraps
from pathlib import Path
from typing import Any, Callable, TypeVar

import structlog

# Context variable for cycle tracking
cycle_id_var: ContextVar[str | None] = ContextVar("cycle_id", default=None)

F = TypeVar("F", bound=Callable[..., Any])


def add_context_info(
    logger: structlog.BoundLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add cycle context to log events."""
    if cycle_id := cycle_id_var.get():
        event_dict["cycle_id"] = cycle_id
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    log_file: str | None = None,
    service_name: str = "gadgetbridge-etl",
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (json or console)
        log_file: Optional file path for log output
        service_name: Service name for log identification
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_context_info,
        structlog.processors.format_exc_info,
    ]

    if format == "json":
        processors = shared_processors + [
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory: Any = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )

    # Standard library logging (SQLAlchemy and friends)
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = structlog.get_logger("gadgetbridge_etl")
    logger.info(
        "Logging initialized",
        service=service_name,
        level=level,
        format=format,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """
    Get a logger instance with optional initial context.

    Args:
        name: Logger name (module name recommended)
        **initial_context: Initial context to bind to the logger

    Returns:
        Configured structlog BoundLogger
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def new_cycle_id() -> str:
    """Generate and activate a cycle identifier for subsequent log events."""
    cycle_id = uuid.uuid4().hex[:12]
    cycle_id_var.set(cycle_id)
    return cycle_id


def clear_cycle_id() -> None:
    cycle_id_var.set(None)


def log_execution_time(
    logger: structlog.BoundLogger | None = None,
    level: str = "info",
    message: str = "Operation completed",
) -> Callable[[F], F]:
    """
    Decorator to log function execution time.

    Args:
        logger: Logger to use (creates one if not provided)
        level: Log level for the message
        message: Log message template

    Returns:
        Decorated function
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = logger or get_logger(func.__module__)
            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
                duration = time.perf_counter() - start_time
                getattr(log, level)(
                    message,
                    function=func.__name__,
                    duration_seconds=round(duration, 4),
                    status="success",
                )
                return result
            except Exception as e:
                duration = time.perf_counter() - start_time
                log.error(
                    f"{message} - failed",
                    function=func.__name__,
                    duration_seconds=round(duration, 4),
                    status="error",
                    error=str(e),
                )
                raise

        return wrapper  # type: ignore

    return decorator


__all__ = [
    "setup_logging",
    "get_logger",
    "new_cycle_id",
    "clear_cycle_id",
    "log_execution_time",
    "cycle_id_var",
]
