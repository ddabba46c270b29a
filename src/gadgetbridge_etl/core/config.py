"""Configuration management for Gadgetbridge ETL."""

from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gadgetbridge_etl.core.exceptions import ConfigurationError
from gadgetbridge_etl.extraction.catalog import TableDescriptor
from gadgetbridge_etl.utils.helpers import parse_duration


class LogFormat(str, Enum):
    """Supported log renderers."""

    JSON = "json"
    CONSOLE = "console"


# ============================================================================
# Sources Configuration
# ============================================================================
class SourcesConfig(BaseModel):
    """Databases to read from."""

    database_paths: list[str] = Field(
        default_factory=list,
        description="Gadgetbridge auto-export SQLite files, opened read-only",
    )

    @field_validator("database_paths")
    @classmethod
    def _no_blank_paths(cls, value: list[str]) -> list[str]:
        for path in value:
            if not path or not path.strip():
                raise ValueError("database paths must be non-empty strings")
        return value


# ============================================================================
# Catalog Configuration
# ============================================================================
class CatalogConfig(BaseModel):
    """Tables extracted in addition to the built-in catalog."""

    extra_tables: list[TableDescriptor] = Field(default_factory=list)


# ============================================================================
# State Configuration
# ============================================================================
class StateConfig(BaseModel):
    """Where the watermark state is persisted between runs."""

    path: str | None = Field(default=None, description="JSON state file")
    save_every_cycle: bool = Field(default=True)


# ============================================================================
# Scheduler Configuration
# ============================================================================
class SchedulerConfig(BaseModel):
    """Polling configuration for the command-line host."""

    poll_interval: str = Field(default="5 minutes")
    enabled: bool = Field(default=True)

    @field_validator("poll_interval")
    @classmethod
    def _valid_duration(cls, value: str) -> str:
        parse_duration(value)
        return value


# ============================================================================
# Logging Configuration
# ============================================================================
class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    format: LogFormat = Field(default=LogFormat.JSON)
    file: str | None = Field(default=None)


# ============================================================================
# Main Settings
# ============================================================================
class Settings(BaseSettings):
    """Main settings for Gadgetbridge ETL."""

    model_config = SettingsConfigDict(
        env_prefix="GADGETBRIDGE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    state: StateConfig = Field(default_factory=StateConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """
        Load settings from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the file does not describe valid settings
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                "Configuration root must be a mapping",
                details={"path": str(path)},
            )

        # Expand environment variables
        config_dict = cls._expand_env_vars(config_dict)

        try:
            return cls(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {path}: {e}",
                details={"path": str(path)},
            ) from e

    @classmethod
    def _expand_env_vars(cls, config: Any) -> Any:
        """Recursively expand environment variables in config."""
        if isinstance(config, dict):
            return {k: cls._expand_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [cls._expand_env_vars(item) for item in config]
        elif isinstance(config, str):
            # Handle ${VAR} and ${VAR:default} syntax
            if config.startswith("${") and "}" in config:
                var_part = config[2 : config.index("}")]
                if ":" in var_part:
                    var_name, default = var_part.split(":", 1)
                else:
                    var_name, default = var_part, None

                value = os.environ.get(var_name, default)
                return value if value is not None else config
            return config
        return config


@lru_cache
def get_settings(config_path: str | None = None) -> Settings:
    """Get cached settings instance."""
    if config_path:
        return Settings.from_yaml(config_path)

    # Try default locations
    default_paths = [
        Path("config/gadgetbridge.yaml"),
        Path("gadgetbridge.yaml"),
        Path.home() / ".gadgetbridge-etl" / "settings.yaml",
    ]

    for path in default_paths:
        if path.exists():
            return Settings.from_yaml(path)

    # Return default settings if no config file found
    return Settings()
