"""Measurement points and row value decoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from gadgetbridge_etl.core.utils import from_unix_seconds, to_unix_seconds

Scalar = Union[int, float, str, None]


class ScalarKind(str, Enum):
    """SQLite storage classes a field value can decode to."""

    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    NULL = "null"


@dataclass(frozen=True)
class DataPoint:
    """One decoded row, ready for the sink."""

    measurement: str
    tags: dict[str, str]
    fields: dict[str, Scalar]
    timestamp: datetime

    @property
    def unix_timestamp(self) -> int:
        return to_unix_seconds(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Telegraf JSON metric layout."""
        return {
            "name": self.measurement,
            "tags": dict(self.tags),
            "fields": dict(self.fields),
            "timestamp": self.unix_timestamp,
        }


@dataclass
class DecodedRow:
    """Timestamp, tags and fields decoded from one result row."""

    timestamp: int
    tags: dict[str, str] = field(default_factory=dict)
    fields: dict[str, Scalar] = field(default_factory=dict)

    def to_point(self, measurement: str, base_tags: dict[str, str]) -> DataPoint:
        return DataPoint(
            measurement=measurement,
            tags={**base_tags, **self.tags},
            fields=dict(self.fields),
            timestamp=from_unix_seconds(self.timestamp),
        )


def scalar_kind(value: Any) -> ScalarKind:
    """
    Classify a value returned by the SQLite driver.

    Raises:
        TypeError: If the value has no scalar representation
    """
    if value is None:
        return ScalarKind.NULL
    # bool is an int subclass; SQLite never returns one but callers might
    if isinstance(value, bool):
        return ScalarKind.INTEGER
    if isinstance(value, int):
        return ScalarKind.INTEGER
    if isinstance(value, float):
        return ScalarKind.FLOAT
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        return ScalarKind.TEXT
    raise TypeError(f"unsupported column value of type {type(value).__name__}")


def decode_field(value: Any) -> Scalar:
    """
    Decode a field column value, keeping its native type.

    BLOB values are decoded as UTF-8 text.

    Raises:
        TypeError: If the value type is not supported
        ValueError: If a BLOB is not valid UTF-8
    """
    kind = scalar_kind(value)
    if kind is ScalarKind.NULL:
        return None
    if kind is ScalarKind.INTEGER:
        return int(value)
    if kind is ScalarKind.FLOAT:
        return float(value)
    return _as_text(value)


def decode_tag(value: Any) -> str:
    """
    Decode a tag column value as text.

    Numbers are rendered with ``str``. NULL has no text form.

    Raises:
        ValueError: If the value is NULL or an undecodable BLOB
        TypeError: If the value type is not supported
    """
    kind = scalar_kind(value)
    if kind is ScalarKind.NULL:
        raise ValueError("NULL cannot be converted to a tag value")
    if kind is ScalarKind.TEXT:
        return _as_text(value)
    return str(int(value) if kind is ScalarKind.INTEGER else value)


def decode_timestamp(value: Any) -> int:
    """
    Decode the timestamp column as integer epoch seconds.

    Integral floats and decimal strings are accepted, as SQLite may store
    either depending on column affinity. The value must also fall within the
    range a UTC datetime can represent, which rules out millisecond epochs.

    Raises:
        ValueError: If the value is not an integral number of seconds or is
            out of range
    """
    seconds = _parse_timestamp(value)
    try:
        from_unix_seconds(seconds)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"timestamp {seconds} is out of range: {e}") from e
    return seconds


def _parse_timestamp(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"invalid timestamp value: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"timestamp is not a whole number of seconds: {value!r}")
        return int(value)
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        text = _as_text(value).strip()
        try:
            return int(text)
        except ValueError:
            raise ValueError(f"invalid timestamp value: {text!r}") from None
    raise ValueError(f"invalid timestamp value of type {type(value).__name__}")


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return bytes(value).decode("utf-8")
