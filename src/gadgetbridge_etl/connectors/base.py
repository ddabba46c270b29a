"""Base connector interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import structlog

from gadgetbridge_etl.core.exceptions import StorageError

logger = structlog.get_logger()


@dataclass
class ConnectorConfig:
    """Base configuration for connectors."""

    name: str
    timeout: float = 5.0


class BaseConnector(ABC):
    """Abstract base class for database connectors."""

    def __init__(self, config: ConnectorConfig) -> None:
        self.config = config
        self.logger = logger.bind(connector=config.name)
        self._connected = False

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data source."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection."""
        pass

    @abstractmethod
    def test_connection(self) -> bool:
        """Test if the connection is valid."""
        pass

    @property
    def is_connected(self) -> bool:
        """Check if connector is connected."""
        return self._connected

    def __enter__(self) -> "BaseConnector":
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.disconnect()

    def _validate_connection(self) -> None:
        """Ensure connector is connected."""
        if not self._connected:
            raise StorageError(
                "Connector is not connected",
                details={"connector": self.config.name},
            )
