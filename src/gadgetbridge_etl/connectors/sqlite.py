"""Read-only SQLite connector."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlencode

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from gadgetbridge_etl.connectors.base import BaseConnector, ConnectorConfig
from gadgetbridge_etl.core.exceptions import StorageCloseError, StorageOpenError


@dataclass
class SQLiteConfig(ConnectorConfig):
    """SQLite connection configuration."""

    path: str = ""
    read_only: bool = True
    immutable: bool = True


class SQLiteConnector(BaseConnector):
    """
    SQLite connector holding a single DBAPI connection.

    SQLite does not support concurrent access well, so the engine is backed
    by a ``StaticPool``: every checkout reuses the same connection and the
    connector hands out one SQLAlchemy ``Connection`` for its whole lifetime.
    """

    def __init__(self, config: SQLiteConfig) -> None:
        super().__init__(config)
        self.sqlite_config = config
        self._engine: Engine | None = None
        self._connection: Connection | None = None

    @property
    def path(self) -> str:
        return self.sqlite_config.path

    def _get_uri(self) -> str:
        """Build the ``file:`` URI passed to sqlite3."""
        uri = Path(self.sqlite_config.path).expanduser().absolute().as_uri()
        params = {}
        if self.sqlite_config.read_only:
            params["mode"] = "ro"
        if self.sqlite_config.immutable:
            params["immutable"] = "1"
        if params:
            uri = f"{uri}?{urlencode(params)}"
        return uri

    def _create_dbapi_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(
            self._get_uri(),
            uri=True,
            timeout=self.config.timeout,
            check_same_thread=False,
        )

    def connect(self) -> None:
        """
        Open the database.

        The DBAPI connection is established eagerly so a missing or
        unreadable file fails here rather than on the first query.

        Raises:
            StorageOpenError: If the file cannot be opened
        """
        try:
            self._engine = create_engine(
                "sqlite://",
                creator=self._create_dbapi_connection,
                poolclass=StaticPool,
            )
            self._connection = self._engine.connect()
        except (SQLAlchemyError, sqlite3.Error, OSError, ValueError) as e:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
            raise StorageOpenError(
                f"Failed to open SQLite database {self.path!r}: {e}",
                path=self.path,
            ) from e

        self._connected = True
        self.logger.debug("Opened SQLite database", path=self.path)

    def disconnect(self) -> None:
        """
        Close the connection.

        Raises:
            StorageCloseError: If releasing the connection fails
        """
        connection, engine = self._connection, self._engine
        self._connection = None
        self._engine = None
        self._connected = False

        try:
            try:
                if connection is not None:
                    connection.close()
            finally:
                if engine is not None:
                    engine.dispose()
        except (SQLAlchemyError, sqlite3.Error) as e:
            raise StorageCloseError(
                f"Failed to close SQLite database {self.path!r}: {e}",
                path=self.path,
            ) from e

        self.logger.debug("Closed SQLite database", path=self.path)

    def test_connection(self) -> bool:
        """Test if the connection is valid."""
        if self._connection is None:
            return False
        try:
            self._connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    @property
    def connection(self) -> Connection:
        """The open SQLAlchemy connection."""
        self._validate_connection()
        assert self._connection is not None
        return self._connection
