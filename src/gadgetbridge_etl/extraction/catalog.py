"""Table descriptors and the merged extraction catalog."""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Iterator, Mapping

import structlog
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from gadgetbridge_etl.core.exceptions import ConfigurationError

logger = structlog.get_logger()


class TableDescriptor(BaseModel):
    """
    Declarative layout of one table to extract.

    The timestamp column holds integer epoch seconds and drives both the
    watermark filter and the scan order. Tag columns are read as text,
    field columns keep whatever scalar type SQLite stored.

    Accepts either the flat layout::

        {"name": "BATTERY_LEVEL", "timestamp": "TIMESTAMP", "tags": [...], "fields": [...]}

    or the nested one::

        {"table": "BATTERY_LEVEL", "columns": {"timestamp": "TIMESTAMP", ...}}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(validation_alias=AliasChoices("name", "table"))
    timestamp_column: str = Field(
        validation_alias=AliasChoices("timestamp_column", "timestamp"),
    )
    tag_columns: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("tag_columns", "tags"),
    )
    field_columns: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("field_columns", "fields"),
    )

    @model_validator(mode="before")
    @classmethod
    def _flatten_columns(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and "columns" in data:
            data = dict(data)
            columns = data.pop("columns") or {}
            if not isinstance(columns, Mapping):
                raise ValueError("'columns' must be a mapping")
            for key, value in columns.items():
                data.setdefault(key, value)
        return data

    @field_validator("name", "timestamp_column")
    @classmethod
    def _require_non_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be a non-empty string")
        return value.strip()

    @field_validator("tag_columns", "field_columns")
    @classmethod
    def _require_column_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for column in value:
            if not column or not column.strip():
                raise ValueError("column names must be non-empty strings")
        return tuple(column.strip() for column in value)

    @model_validator(mode="after")
    def _check_timestamp_not_reused(self) -> "TableDescriptor":
        if self.timestamp_column in self.tag_columns + self.field_columns:
            raise ValueError(
                f"timestamp column {self.timestamp_column!r} cannot also be a tag or field"
            )
        return self

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "TableDescriptor":
        """
        Build a descriptor from configuration data.

        Raises:
            ConfigurationError: If the descriptor is malformed
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid table descriptor: {e.errors()[0]['msg']}",
                details={"table": data.get("name", data.get("table"))},
            ) from e

    @property
    def columns(self) -> tuple[str, ...]:
        """All selected columns: timestamp, then tags, then fields."""
        return (self.timestamp_column, *self.tag_columns, *self.field_columns)

    @property
    def measurement(self) -> str:
        """Measurement name for points read from this table."""
        return self.name.lower()


BUILTIN_TABLES: tuple[TableDescriptor, ...] = (
    TableDescriptor(
        name="HYBRID_HRACTIVITY_SAMPLE",
        timestamp_column="TIMESTAMP",
        tag_columns=("USER_ID", "DEVICE_ID"),
        field_columns=(
            "WEAR_TYPE",
            "STEPS",
            "CALORIES",
            "VARIABILITY",
            "MAX_VARIABILITY",
            "HEARTRATE_QUALITY",
            "ACTIVE",
            "HEART_RATE",
        ),
    ),
    TableDescriptor(
        name="BATTERY_LEVEL",
        timestamp_column="TIMESTAMP",
        tag_columns=("DEVICE_ID", "BATTERY_INDEX"),
        field_columns=("LEVEL",),
    ),
)


class SchemaCatalog:
    """Ordered, immutable sequence of table descriptors."""

    def __init__(self, descriptors: Iterable[TableDescriptor] = ()) -> None:
        self._descriptors: tuple[TableDescriptor, ...] = tuple(descriptors)

    @classmethod
    def merge(
        cls,
        builtins: Iterable[TableDescriptor | Mapping[str, Any]],
        extras: Iterable[TableDescriptor | Mapping[str, Any]] = (),
    ) -> "SchemaCatalog":
        """
        Concatenate built-in and extra descriptors, preserving order.

        Names are not deduplicated: a table declared twice is scanned twice
        and both scans share one watermark.

        Args:
            builtins: Descriptors shipped with the package
            extras: User-supplied descriptors, appended after the built-ins

        Returns:
            The merged catalog

        Raises:
            ConfigurationError: If a mapping is not a valid descriptor
        """
        merged: list[TableDescriptor] = []
        for item in (*builtins, *extras):
            if isinstance(item, TableDescriptor):
                merged.append(item)
            elif isinstance(item, Mapping):
                merged.append(TableDescriptor.from_config(item))
            else:
                raise ConfigurationError(
                    f"Unsupported table descriptor type: {type(item).__name__}"
                )

        catalog = cls(merged)
        duplicates = catalog.duplicate_names()
        if duplicates:
            logger.warning(
                "Catalog declares tables more than once",
                tables=duplicates,
            )
        return catalog

    def names(self) -> list[str]:
        """Table names in scan order."""
        return [d.name for d in self._descriptors]

    def duplicate_names(self) -> list[str]:
        counts = Counter(self.names())
        return [name for name, count in counts.items() if count > 1]

    def __iter__(self) -> Iterator[TableDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __getitem__(self, index: int) -> TableDescriptor:
        return self._descriptors[index]

    def __repr__(self) -> str:
        return f"SchemaCatalog({self.names()!r})"
