# courier_tracker/services/locations/service.py
"""
Read side of courier positions for the dashboard.

Serves the latest position per courier, joined with the courier's name and
status. Never writes to the location store.
"""

from __future__ import annotations

from typing import List

from courier_tracker.common.logger import log_error, log_warning
from courier_tracker.core.tracking.exceptions import StoreError
from courier_tracker.core.tracking.projector import LatestPositionProjector, latest_per_courier
from courier_tracker.core.tracking.store import LocationStore
from courier_tracker.services.users.repository import UserRepository
from courier_tracker.shared.models.location import (
    CourierIdentity,
    LatestLocationResponse,
    StoredSample,
)

LOGGER_NAME = "locations"


class LocationQueryService:
    def __init__(
        self,
        store: LocationStore,
        projector: LatestPositionProjector,
        users: UserRepository,
    ):
        self.store = store
        self.projector = projector
        self.users = users

    async def latest_positions(self) -> List[LatestLocationResponse]:
        """
        Newest sample per courier, most recent first.

        Store or user lookup failures are logged; the response then carries
        what is still known (cached positions, or positions without identity).
        """
        latest = await self._latest_samples()
        identities = await self._identities(latest.keys())

        rows = [
            LatestLocationResponse(
                id=sample.id,
                delivery_person_id=sample.courier_id,
                latitude=sample.latitude,
                longitude=sample.longitude,
                accuracy=sample.accuracy,
                speed=sample.speed,
                timestamp=sample.recorded_at,
                courier=identities.get(sample.courier_id),
            )
            for sample in latest.values()
        ]
        rows.sort(key=lambda row: (row.timestamp, row.id), reverse=True)
        return rows

    async def _latest_samples(self) -> dict[str, StoredSample]:
        if self.projector.is_warm:
            return self.projector.snapshot()

        try:
            return latest_per_courier(await self.store.query_all())
        except StoreError as e:
            await log_warning(f"Location store unavailable, serving cached positions: {e}", logger_name=LOGGER_NAME)
            return self.projector.snapshot()

    async def _identities(self, courier_ids) -> dict[str, CourierIdentity]:
        # courier ids are opaque in the location log; only ASCII-numeric ones map to users
        numeric = {cid: int(cid) for cid in courier_ids if cid.isascii() and cid.isdigit()}
        if not numeric:
            return {}

        try:
            users = await self.users.get_users_by_ids(numeric.values())
        except Exception as e:
            await log_error(f"Courier lookup failed, positions served without identity: {e}", logger_name=LOGGER_NAME)
            return {}

        by_id = {user.id: CourierIdentity(id=user.id, name=user.name, status=user.status) for user in users}
        return {cid: by_id[uid] for cid, uid in numeric.items() if uid in by_id}
