# tests/conftest.py
"""
Shared fixtures for the test suite.
"""

from __future__ import annotations

import asyncio
import json
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

# environment must be set before the config module is imported
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("ENVIRONMENT", "test")

from courier_tracker.core.tracking.context import TrackingContext, build_tracking_context
from courier_tracker.core.tracking.exceptions import StoreError
from courier_tracker.shared.models.location import PositionSample, StoredSample


BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# TRACKING DOUBLES
# =============================================================================

class InMemoryLocationStore:
    """
    Location store kept in a list.

    hold_next_append() / hold_next_query() return an event the next call
    waits on, which lets a test decide the order writes resolve in.
    """

    def __init__(self) -> None:
        self.samples: list[StoredSample] = []
        self.fail_append = False
        self.fail_query = False
        self.append_calls = 0
        self._next_id = 1
        self._append_holds: list[asyncio.Event] = []
        self._query_holds: list[asyncio.Event] = []

    def hold_next_append(self) -> asyncio.Event:
        event = asyncio.Event()
        self._append_holds.append(event)
        return event

    def hold_next_query(self) -> asyncio.Event:
        event = asyncio.Event()
        self._query_holds.append(event)
        return event

    async def append(self, sample: PositionSample) -> StoredSample:
        self.append_calls += 1
        hold = self._append_holds.pop(0) if self._append_holds else None
        if hold is not None:
            await hold.wait()
        if self.fail_append:
            raise StoreError(f"write failed for courier {sample.courier_id}")

        stored = StoredSample(
            id=self._next_id,
            courier_id=sample.courier_id,
            latitude=sample.latitude,
            longitude=sample.longitude,
            accuracy=sample.accuracy,
            speed=sample.speed,
            recorded_at=sample.recorded_at or BASE_TIME,
        )
        self._next_id += 1
        self.samples.append(stored)
        return stored

    async def query_all(self) -> list[StoredSample]:
        hold = self._query_holds.pop(0) if self._query_holds else None
        if hold is not None:
            await hold.wait()
        if self.fail_query:
            raise StoreError("read failed")
        return sorted(self.samples, key=lambda s: (s.recorded_at, s.id), reverse=True)


class FakeConnection:
    """Subscriber that records what it was handed."""

    def __init__(self, connection_id: str, accept: bool = True) -> None:
        self.id = connection_id
        self.accept = accept
        self.messages: list[dict[str, Any]] = []

    def deliver(self, message: dict[str, Any]) -> bool:
        if not self.accept:
            return False
        self.messages.append(message)
        return True

    def events(self, name: str) -> list[dict[str, Any]]:
        return [m for m in self.messages if m.get("event") == name]

    def __repr__(self) -> str:
        return f"FakeConnection({self.id!r})"


class TickingClock:
    """Clock that moves one second forward per call."""

    def __init__(self, start: datetime = BASE_TIME, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


def scripted_clock(*times: datetime) -> Callable[[], datetime]:
    """Clock returning the given instants in order."""
    it = iter(times)
    return lambda: next(it)


def make_sample(
    courier_id: str,
    sample_id: int,
    seconds: int,
    latitude: float = 40.0,
    longitude: float = -3.0,
) -> StoredSample:
    return StoredSample(
        id=sample_id,
        courier_id=courier_id,
        latitude=latitude,
        longitude=longitude,
        recorded_at=BASE_TIME + timedelta(seconds=seconds),
    )


# =============================================================================
# TRACKING FIXTURES
# =============================================================================

@pytest.fixture
def store() -> InMemoryLocationStore:
    return InMemoryLocationStore()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def tracking_context(store: InMemoryLocationStore, clock: TickingClock) -> TrackingContext:
    """Tracking context around the in-memory store."""
    return build_tracking_context(store, clock=clock, send_queue_size=10)


# =============================================================================
# INFRASTRUCTURE MOCKS
# =============================================================================

@pytest.fixture
def mock_conn() -> AsyncMock:
    """Mock asyncpg connection."""
    conn = AsyncMock()
    conn.fetchrow = AsyncMock(return_value=None)
    conn.fetch = AsyncMock(return_value=[])
    conn.execute = AsyncMock(return_value="INSERT 0 1")
    conn.fetchval = AsyncMock(return_value=None)
    return conn


@pytest.fixture
def mock_db(mock_conn: AsyncMock) -> MagicMock:
    """Mock DatabaseManager whose acquire() yields mock_conn."""
    db = MagicMock()

    @asynccontextmanager
    async def acquire():
        yield mock_conn

    db.acquire = acquire
    db.transaction = acquire
    db.is_connected = True
    db.health_check = AsyncMock(return_value=True)
    return db


# =============================================================================
# SAMPLE DATA
# =============================================================================

@pytest.fixture
def sample_user_data() -> dict[str, Any]:
    """A courier row of the users table."""
    return {
        "id": 7,
        "username": "maria",
        "name": "Maria Lopez",
        "role": "delivery",
        "status": "available",
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }


@pytest.fixture
def sample_package_row() -> dict[str, Any]:
    """A packages row joined with its courier."""
    return {
        "id": 11,
        "recipient": "Ana Ruiz",
        "address": "Calle Mayor 1, Madrid",
        "delivery_person_id": 7,
        "status": "assigned",
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
        "courier_id": 7,
        "courier_name": "Maria Lopez",
        "courier_username": "maria",
    }


# =============================================================================
# CONFIG
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Test configuration."""
    return {
        "PROJECT_NAME": "courier_tracker_test",
        "VERSION": "1.0.0-test",
        "DEBUG": False,
        "LOG_LEVEL": "INFO",
        "ENVIRONMENT": "test",
        "API_HOST": "127.0.0.1",
        "API_PORT": 3100,
        "CORS_ORIGINS": ["http://localhost:4200"],
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "json",
        "DB_HOST": "db.internal",
        "DB_PORT": 5433,
        "DB_NAME": "courier_tracker_test",
        "DB_USER": "tracker",
        "DB_MIN_POOL_SIZE": 1,
        "DB_MAX_POOL_SIZE": 3,
        "TRACKING_ADMIN_CHANNEL": "dashboard",
        "TRACKING_COURIER_CHANNEL_PREFIX": "courier-",
        "TRACKING_SEND_QUEUE_SIZE": 5,
        "TRACKING_REBUILD_ON_STARTUP": False,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Writes mock_config to a temporary config.json."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, indent=2))
    return config_file
