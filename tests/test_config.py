"""Tests for configuration management."""

from datetime import timedelta

import pytest

from gadgetbridge_etl.core.config import LogFormat, Settings
from gadgetbridge_etl.core.exceptions import ConfigurationError
from gadgetbridge_etl.utils.helpers import format_duration, parse_duration


class TestDefaults:
    """Test default settings."""

    def test_settings_with_minimal_config(self):
        """Should create settings with minimal configuration."""
        settings = Settings()
        assert settings.sources.database_paths == []
        assert settings.catalog.extra_tables == []
        assert settings.state.path is None

    def test_default_poll_interval(self):
        assert parse_duration(Settings().scheduler.poll_interval) == timedelta(minutes=5)

    def test_default_logging(self):
        settings = Settings()
        assert settings.logging.level == "INFO"
        assert settings.logging.format == LogFormat.JSON


class TestSettingsFromYaml:
    """Test loading settings from YAML files."""

    def test_load_yaml(self, temp_dir):
        config = temp_dir / "settings.yaml"
        config.write_text(
            "sources:\n"
            "  database_paths: [/data/Gadgetbridge.db]\n"
            "catalog:\n"
            "  extra_tables:\n"
            "    - name: XIAOMI_ACTIVITY_SAMPLE\n"
            "      timestamp: TIMESTAMP\n"
            "      tags: [DEVICE_ID]\n"
            "      fields: [STEPS]\n"
            "scheduler:\n"
            "  poll_interval: 30s\n"
        )

        settings = Settings.from_yaml(config)

        assert settings.sources.database_paths == ["/data/Gadgetbridge.db"]
        assert settings.catalog.extra_tables[0].name == "XIAOMI_ACTIVITY_SAMPLE"
        assert settings.catalog.extra_tables[0].field_columns == ("STEPS",)
        assert settings.scheduler.poll_interval == "30s"

    def test_env_var_expansion(self, temp_dir, monkeypatch):
        monkeypatch.setenv("TEST_GB_DB", "/mnt/export.db")
        config = temp_dir / "settings.yaml"
        config.write_text(
            "sources:\n"
            "  database_paths: ['${TEST_GB_DB}', '${TEST_GB_MISSING:/fallback.db}']\n"
        )

        settings = Settings.from_yaml(config)

        assert settings.sources.database_paths == ["/mnt/export.db", "/fallback.db"]

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(temp_dir / "missing.yaml")

    def test_empty_file(self, temp_dir):
        config = temp_dir / "settings.yaml"
        config.write_text("")
        assert Settings.from_yaml(config).sources.database_paths == []

    def test_invalid_extra_table(self, temp_dir):
        """A descriptor without a timestamp column is rejected at load time."""
        config = temp_dir / "settings.yaml"
        config.write_text(
            "catalog:\n"
            "  extra_tables:\n"
            "    - name: BROKEN\n"
            "      timestamp: ''\n"
        )

        with pytest.raises(ConfigurationError):
            Settings.from_yaml(config)

    def test_invalid_poll_interval(self, temp_dir):
        config = temp_dir / "settings.yaml"
        config.write_text("scheduler:\n  poll_interval: often\n")

        with pytest.raises(ConfigurationError):
            Settings.from_yaml(config)

    def test_non_mapping_root(self, temp_dir):
        config = temp_dir / "settings.yaml"
        config.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            Settings.from_yaml(config)


class TestEnvironmentOverrides:
    """Test environment variable overrides."""

    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("GADGETBRIDGE_STATE__PATH", "/tmp/state.json")
        assert Settings().state.path == "/tmp/state.json"

    def test_log_level_override(self, monkeypatch):
        monkeypatch.setenv("GADGETBRIDGE_LOGGING__LEVEL", "DEBUG")
        assert Settings().logging.level == "DEBUG"


class TestDurations:
    """Test duration parsing."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("5m", timedelta(minutes=5)),
            ("5 minutes", timedelta(minutes=5)),
            ("90s", timedelta(seconds=90)),
            ("1 hour", timedelta(hours=1)),
            ("2h", timedelta(hours=2)),
            ("1 day", timedelta(days=1)),
        ],
    )
    def test_parse_duration(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "five minutes", "5 fortnights", "-1m"])
    def test_invalid_duration(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)

    def test_format_duration(self):
        assert format_duration(timedelta(minutes=5)) == "5m"
        assert format_duration(timedelta(seconds=90)) == "90s"
        assert format_duration(timedelta(hours=3)) == "3h"
