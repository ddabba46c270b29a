"""Tests for row value decoding and data points."""

from datetime import datetime, timezone

import pytest

from gadgetbridge_etl.extraction.points import (
    DataPoint,
    DecodedRow,
    ScalarKind,
    decode_field,
    decode_tag,
    decode_timestamp,
    scalar_kind,
)


class TestScalarKind:
    """Test classification of driver values."""

    @pytest.mark.parametrize(
        "value, kind",
        [
            (None, ScalarKind.NULL),
            (42, ScalarKind.INTEGER),
            (1.5, ScalarKind.FLOAT),
            ("text", ScalarKind.TEXT),
            (b"blob", ScalarKind.TEXT),
        ],
    )
    def test_classify(self, value, kind):
        assert scalar_kind(value) is kind

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            scalar_kind(object())


class TestDecodeField:
    """Field values keep their native type."""

    def test_integer_stays_integer(self):
        value = decode_field(72)
        assert value == 72
        assert isinstance(value, int)

    def test_float_stays_float(self):
        value = decode_field(36.6)
        assert isinstance(value, float)

    def test_text(self):
        assert decode_field("deep") == "deep"

    def test_null(self):
        assert decode_field(None) is None

    def test_blob_decoded_as_text(self):
        assert decode_field(b"abc") == "abc"

    def test_invalid_utf8_blob(self):
        with pytest.raises(ValueError):
            decode_field(b"\xff\xfe")


class TestDecodeTag:
    """Tags are always text."""

    def test_integer_tag(self):
        assert decode_tag(3) == "3"

    def test_text_tag(self):
        assert decode_tag("watch") == "watch"

    def test_null_tag_rejected(self):
        with pytest.raises(ValueError):
            decode_tag(None)


class TestDecodeTimestamp:
    """Timestamps are integer epoch seconds."""

    def test_integer(self):
        assert decode_timestamp(1700000000) == 1700000000

    def test_integral_float(self):
        assert decode_timestamp(300.0) == 300

    def test_numeric_text(self):
        assert decode_timestamp("400") == 400

    @pytest.mark.parametrize("value", [None, 1.5, "noon", True])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            decode_timestamp(value)

    def test_millisecond_epoch_out_of_range(self):
        with pytest.raises(ValueError) as exc_info:
            decode_timestamp(1700000000000)

        assert "out of range" in str(exc_info.value)


class TestDataPoint:
    """Test point construction."""

    def test_decoded_row_to_point(self):
        row = DecodedRow(timestamp=100, tags={"device_id": "1"}, fields={"level": 90})
        point = row.to_point("battery_level", {"database_path": "/db"})

        assert point.measurement == "battery_level"
        assert point.tags == {"database_path": "/db", "device_id": "1"}
        assert point.fields == {"level": 90}
        assert point.timestamp == datetime(1970, 1, 1, 0, 1, 40, tzinfo=timezone.utc)

    def test_to_dict(self):
        point = DataPoint(
            measurement="battery_level",
            tags={"database_path": "/db"},
            fields={"level": 90},
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        assert point.to_dict() == {
            "name": "battery_level",
            "tags": {"database_path": "/db"},
            "fields": {"level": 90},
            "timestamp": 1704067200,
        }
