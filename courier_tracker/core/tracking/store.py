# courier_tracker/core/tracking/store.py
"""
Durable, append-only log of courier position samples.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Protocol

import asyncpg

from courier_tracker.core.tracking.exceptions import StoreError
from courier_tracker.infra.database import CONNECTION_ERRORS, DatabaseManager
from courier_tracker.shared.models.location import PositionSample, StoredSample


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocationStore(Protocol):
    """What the coordinator and projector need from a store."""

    async def append(self, sample: PositionSample) -> StoredSample:
        ...

    async def query_all(self) -> list[StoredSample]:
        ...


class PostgresLocationStore:
    """
    delivery_locations table.

    Never retries: a failed write is raised as StoreError and the caller
    decides what to do with the sample.
    """

    INSERT_QUERY = """
        INSERT INTO delivery_locations (
            delivery_person_id, latitude, longitude, location, accuracy, speed, timestamp
        )
        VALUES ($1, $2, $3, ST_SetSRID(ST_MakePoint($3, $2), 4326)::geography, $4, $5, $6)
        RETURNING id, delivery_person_id, latitude, longitude, accuracy, speed, timestamp
    """

    SELECT_ALL_QUERY = """
        SELECT id, delivery_person_id, latitude, longitude, accuracy, speed, timestamp
        FROM delivery_locations
        ORDER BY timestamp DESC, id DESC
    """

    def __init__(self, db: DatabaseManager, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self._clock = clock

    async def append(self, sample: PositionSample) -> StoredSample:
        """Records one sample and returns it with its id and timestamp."""
        recorded_at = sample.recorded_at or self._clock()
        try:
            async with self.db.acquire() as conn:
                record = await conn.fetchrow(
                    self.INSERT_QUERY,
                    sample.courier_id,
                    sample.latitude,
                    sample.longitude,
                    sample.accuracy,
                    sample.speed,
                    recorded_at,
                )
        except (asyncpg.PostgresError, RuntimeError, *CONNECTION_ERRORS) as e:
            raise StoreError(f"Failed to store location for courier {sample.courier_id}: {e}", cause=e) from e

        if record is None:
            raise StoreError(f"Insert returned no row for courier {sample.courier_id}")
        return StoredSample.from_record(record)

    async def query_all(self) -> list[StoredSample]:
        """All recorded samples, newest first."""
        try:
            async with self.db.acquire() as conn:
                records = await conn.fetch(self.SELECT_ALL_QUERY)
        except (asyncpg.PostgresError, RuntimeError, *CONNECTION_ERRORS) as e:
            raise StoreError(f"Failed to read locations: {e}", cause=e) from e

        return [StoredSample.from_record(record) for record in records]
