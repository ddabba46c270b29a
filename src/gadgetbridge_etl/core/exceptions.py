"""Custom exceptions for Gadgetbridge ETL."""

from typing import Any


class GadgetbridgeETLError(Exception):
    """Base exception for all Gadgetbridge ETL errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(GadgetbridgeETLError):
    """Raised when there's a configuration error."""

    pass


class StorageError(GadgetbridgeETLError):
    """Raised when a source database cannot be opened or released."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.path = path
        super().__init__(message, details)


class StorageOpenError(StorageError):
    """Raised when a source database cannot be opened."""

    pass


class StorageCloseError(StorageError):
    """Raised when releasing a source database fails."""

    pass


class ExtractionError(GadgetbridgeETLError):
    """
    Raised when extracting a table fails.

    ``rows_emitted`` counts the points delivered from the table before the
    failure; their watermark progress is kept.
    """

    def __init__(
        self,
        message: str,
        table: str | None = None,
        details: dict[str, Any] | None = None,
        rows_emitted: int = 0,
    ) -> None:
        self.table = table
        self.rows_emitted = rows_emitted
        super().__init__(message, details)


class QueryBuildError(ExtractionError):
    """Raised when the scan for a table cannot be built or prepared."""

    pass


class ScanError(ExtractionError):
    """Raised when reading or decoding a row fails mid-table."""

    pass


class SinkError(ExtractionError):
    """Raised when the sink rejects a point."""

    pass


class InvalidStateError(GadgetbridgeETLError):
    """Raised when a persisted state payload has the wrong shape."""

    pass


class GatherError(GadgetbridgeETLError):
    """Aggregate of every failure recorded during one extraction cycle."""

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = list(errors)
        super().__init__(
            "\n".join(str(e) for e in self.errors),
            details=None,
        )
