"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import pytest
import structlog
from sqlalchemy import create_engine, text

from gadgetbridge_etl.core.config import Settings
from gadgetbridge_etl.sinks import MemorySink

SCHEMA = [
    """
    CREATE TABLE "HYBRID_HRACTIVITY_SAMPLE" (
        "TIMESTAMP" INTEGER NOT NULL,
        "DEVICE_ID" INTEGER NOT NULL,
        "USER_ID" INTEGER NOT NULL,
        "WEAR_TYPE" INTEGER NOT NULL,
        "STEPS" INTEGER,
        "CALORIES" INTEGER,
        "VARIABILITY" INTEGER,
        "MAX_VARIABILITY" INTEGER,
        "HEARTRATE_QUALITY" INTEGER,
        "ACTIVE" INTEGER,
        "HEART_RATE" INTEGER,
        PRIMARY KEY ("TIMESTAMP", "DEVICE_ID")
    )
    """,
    """
    CREATE TABLE "BATTERY_LEVEL" (
        "TIMESTAMP" INTEGER NOT NULL,
        "DEVICE_ID" INTEGER NOT NULL,
        "LEVEL" INTEGER NOT NULL,
        "BATTERY_INDEX" INTEGER NOT NULL,
        PRIMARY KEY ("TIMESTAMP", "DEVICE_ID", "BATTERY_INDEX")
    )
    """,
]


class GadgetbridgeDB:
    """A Gadgetbridge-shaped SQLite file that tests can append rows to."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> None:
        engine = create_engine(f"sqlite:///{self.path}")
        try:
            with engine.begin() as conn:
                conn.execute(text(sql), params or {})
        finally:
            engine.dispose()

    def create_schema(self) -> "GadgetbridgeDB":
        for statement in SCHEMA:
            self.execute(statement)
        return self

    def add_battery(
        self,
        timestamp: int,
        level: int = 80,
        device_id: int = 1,
        battery_index: int = 0,
    ) -> None:
        self.execute(
            'INSERT INTO "BATTERY_LEVEL" ("TIMESTAMP", "DEVICE_ID", "LEVEL", "BATTERY_INDEX") '
            "VALUES (:ts, :device, :level, :idx)",
            {"ts": timestamp, "device": device_id, "level": level, "idx": battery_index},
        )

    def add_activity(
        self,
        timestamp: int,
        heart_rate: int | None = 70,
        steps: int | None = 10,
        device_id: int = 1,
        user_id: int = 1,
    ) -> None:
        self.execute(
            'INSERT INTO "HYBRID_HRACTIVITY_SAMPLE" '
            '("TIMESTAMP", "DEVICE_ID", "USER_ID", "WEAR_TYPE", "STEPS", "CALORIES", '
            '"VARIABILITY", "MAX_VARIABILITY", "HEARTRATE_QUALITY", "ACTIVE", "HEART_RATE") '
            "VALUES (:ts, :device, :user, 1, :steps, 3, 40, 55, 2, 1, :hr)",
            {
                "ts": timestamp,
                "device": device_id,
                "user": user_id,
                "steps": steps,
                "hr": heart_rate,
            },
        )

    def __str__(self) -> str:
        return str(self.path)


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_db(temp_dir: Path):
    """Factory for empty Gadgetbridge databases."""
    def factory(name: str = "Gadgetbridge.db") -> GadgetbridgeDB:
        return GadgetbridgeDB(temp_dir / name).create_schema()

    return factory


@pytest.fixture
def gadgetbridge_db(make_db) -> GadgetbridgeDB:
    """Database with three battery readings (100, 200, 300) and no activity."""
    db = make_db()
    db.add_battery(100, level=90)
    db.add_battery(200, level=85)
    db.add_battery(300, level=80)
    return db


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def test_settings(gadgetbridge_db: GadgetbridgeDB, temp_dir: Path) -> Settings:
    """Settings pointing at the fixture database."""
    return Settings(
        sources={"database_paths": [str(gadgetbridge_db)]},
        state={"path": str(temp_dir / "state.json")},
        logging={"level": "DEBUG", "format": "console"},
    )


@pytest.fixture(autouse=True)
def reset_structlog():
    """Keep structlog configuration from leaking between tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Configure logging for tests."""
    import logging
    caplog.set_level(logging.DEBUG)
    return caplog
