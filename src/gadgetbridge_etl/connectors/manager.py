"""One read-only connector per source database, per cycle."""

from __future__ import annotations

import structlog

from gadgetbridge_etl.connectors.sqlite import SQLiteConfig, SQLiteConnector

logger = structlog.get_logger()


class ConnectionManager:
    """
    Open and release source databases.

    Connectors are never pooled or reused: each ``open`` creates a fresh
    read-only, immutable connection that the caller must ``close``.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout
        self.logger = logger.bind(component="connection_manager")

    def open(self, path: str) -> SQLiteConnector:
        """
        Open ``path`` read-only.

        Raises:
            StorageOpenError: If the database cannot be opened
        """
        connector = SQLiteConnector(
            SQLiteConfig(name=path, path=path, timeout=self.timeout)
        )
        connector.connect()
        return connector

    def close(self, connector: SQLiteConnector) -> None:
        """
        Release a connector returned by :meth:`open`.

        Raises:
            StorageCloseError: If the connection cannot be released
        """
        connector.disconnect()
