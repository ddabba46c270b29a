"""Source database connectors."""

from gadgetbridge_etl.connectors.base import BaseConnector, ConnectorConfig
from gadgetbridge_etl.connectors.manager import ConnectionManager
from gadgetbridge_etl.connectors.sqlite import SQLiteConfig, SQLiteConnector

__all__ = [
    "BaseConnector",
    "ConnectorConfig",
    "ConnectionManager",
    "SQLiteConfig",
    "SQLiteConnector",
]
