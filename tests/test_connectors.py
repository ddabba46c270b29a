"""Tests for the read-only SQLite connector and connection manager."""

from unittest.mock import patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from gadgetbridge_etl.connectors import ConnectionManager, SQLiteConfig, SQLiteConnector
from gadgetbridge_etl.core.exceptions import (
    StorageCloseError,
    StorageError,
    StorageOpenError,
)


class TestSQLiteConnector:
    """Test opening and closing source databases."""

    def test_open_existing_database(self, gadgetbridge_db):
        connector = SQLiteConnector(SQLiteConfig(name="db", path=str(gadgetbridge_db)))
        connector.connect()
        try:
            assert connector.is_connected
            assert connector.test_connection()
            count = connector.connection.execute(
                text('SELECT COUNT(*) FROM "BATTERY_LEVEL"')
            ).scalar_one()
            assert count == 3
        finally:
            connector.disconnect()

        assert not connector.is_connected

    def test_uri_is_read_only_and_immutable(self, temp_dir):
        connector = SQLiteConnector(
            SQLiteConfig(name="db", path=str(temp_dir / "my db?.sqlite"))
        )
        uri = connector._get_uri()

        assert uri.startswith("file://")
        assert "mode=ro" in uri
        assert "immutable=1" in uri
        assert "my%20db%3F.sqlite" in uri

    def test_missing_file(self, temp_dir):
        """A missing database fails at open time."""
        connector = SQLiteConnector(
            SQLiteConfig(name="db", path=str(temp_dir / "missing.db"))
        )
        with pytest.raises(StorageOpenError) as exc_info:
            connector.connect()

        assert exc_info.value.path == str(temp_dir / "missing.db")
        assert not connector.is_connected
        assert not (temp_dir / "missing.db").exists()

    def test_writes_are_rejected(self, gadgetbridge_db):
        connector = SQLiteConnector(SQLiteConfig(name="db", path=str(gadgetbridge_db)))
        with connector:
            with pytest.raises(OperationalError):
                connector.connection.execute(
                    text('DELETE FROM "BATTERY_LEVEL"')
                )

    def test_connection_requires_connect(self, gadgetbridge_db):
        connector = SQLiteConnector(SQLiteConfig(name="db", path=str(gadgetbridge_db)))
        with pytest.raises(StorageError):
            connector.connection

    def test_close_failure(self, gadgetbridge_db):
        connector = SQLiteConnector(SQLiteConfig(name="db", path=str(gadgetbridge_db)))
        connector.connect()
        with patch.object(
            connector._connection, "close", side_effect=SQLAlchemyError("boom")
        ):
            with pytest.raises(StorageCloseError):
                connector.disconnect()

        assert not connector.is_connected

    def test_close_failure_still_disposes_engine(self, gadgetbridge_db):
        connector = SQLiteConnector(SQLiteConfig(name="db", path=str(gadgetbridge_db)))
        connector.connect()
        engine = connector._engine
        with patch.object(
            connector._connection, "close", side_effect=SQLAlchemyError("boom")
        ), patch.object(engine, "dispose", wraps=engine.dispose) as dispose:
            with pytest.raises(StorageCloseError):
                connector.disconnect()

        dispose.assert_called_once()


class TestConnectionManager:
    """Test one connector per open call."""

    def test_open_returns_fresh_connectors(self, gadgetbridge_db):
        manager = ConnectionManager()
        first = manager.open(str(gadgetbridge_db))
        manager.close(first)
        second = manager.open(str(gadgetbridge_db))
        manager.close(second)

        assert first is not second
        assert not first.is_connected
        assert not second.is_connected

    def test_open_missing(self, temp_dir):
        with pytest.raises(StorageOpenError):
            ConnectionManager().open(str(temp_dir / "nope.db"))
