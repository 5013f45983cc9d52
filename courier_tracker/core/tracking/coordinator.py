# courier_tracker/core/tracking/coordinator.py
"""
Ingestion and fan-out of courier positions.

Entry point used by transport connections:
1. validate the inbound event
2. stamp it with the server clock
3. append it to the location store (the only suspension point)
4. update the latest-position projection
5. publish it to the admin channel
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from pydantic import ValidationError

from courier_tracker.common.constants import TypeMsg, WsEvent
from courier_tracker.common.logger import log_error, log_info, log_warning
from courier_tracker.core.tracking.exceptions import MalformedPayloadError, StoreError
from courier_tracker.core.tracking.projector import LatestPositionProjector
from courier_tracker.core.tracking.registry import Subscriber, SubscriptionRegistry
from courier_tracker.core.tracking.store import LocationStore, utcnow
from courier_tracker.shared.models.location import (
    DeliveryLocationUpdate,
    LocationUpdatePayload,
    StoredSample,
)


LOGGER_NAME = "tracking"


def parse_location_update(raw_event: Any) -> LocationUpdatePayload:
    """
    Validates a `location-update` body.

    Raises:
        MalformedPayloadError: no courier id, or coordinates missing / not numeric
    """
    if not isinstance(raw_event, dict):
        raise MalformedPayloadError("location-update payload must be an object", payload=raw_event)
    try:
        return LocationUpdatePayload.model_validate(raw_event)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise MalformedPayloadError(
            f"Malformed location-update, invalid fields: {', '.join(fields)}",
            payload=raw_event,
            errors=e.errors(include_url=False),
        ) from e


class IngestionCoordinator:
    """
    Facade over store, projector and registry for connection handlers.

    Does not check that a connection owns the courier id it reports for.
    """

    def __init__(
        self,
        store: LocationStore,
        projector: LatestPositionProjector,
        registry: SubscriptionRegistry,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._projector = projector
        self._registry = registry
        self._clock = clock

        self._total_updates = 0
        self._rejected_updates = 0
        self._store_failures = 0
        self._updates_per_courier: dict[str, int] = {}

    # === MEMBERSHIP ===

    def handle_join_courier(self, connection: Subscriber, courier_id: Any) -> str:
        """Joins the courier's own channel and returns its key."""
        channel = self._registry.courier_channel(str(courier_id))
        self._registry.join(connection, channel)
        return channel

    def handle_join_admin(self, connection: Subscriber) -> str:
        """Joins the admin channel and returns its key."""
        self._registry.join(connection, self._registry.admin_channel)
        return self._registry.admin_channel

    def handle_disconnect(self, connection: Subscriber) -> None:
        """Called by the transport once the connection is gone."""
        self._registry.leave(connection)

    # === INGESTION ===

    async def handle_location_update(
        self,
        connection: Subscriber,
        raw_event: Any,
    ) -> StoredSample | None:
        """
        Ingests one position sample.

        Returns:
            The stored sample, or None when the store rejected it
            (logged, not published, not retried)

        Raises:
            MalformedPayloadError: invalid event; the connection stays usable
        """
        try:
            payload = parse_location_update(raw_event)
        except MalformedPayloadError:
            self._rejected_updates += 1
            raise

        sample = payload.to_sample(recorded_at=self._clock())

        try:
            stored = await self._store.append(sample)
        except StoreError as e:
            self._store_failures += 1
            await log_error(
                f"Location of courier {sample.courier_id} not stored, dropped from fan-out: {e}",
                logger_name=LOGGER_NAME,
                extra={"connection_id": str(connection.id), "courier_id": sample.courier_id},
            )
            return None

        # nothing below may suspend: projection and fan-out are applied atomically
        self._projector.observe(stored)
        message = {
            "event": WsEvent.DELIVERY_LOCATION_UPDATE.value,
            "data": DeliveryLocationUpdate.from_sample(stored).to_wire(),
        }
        delivered = self._registry.publish(self._registry.admin_channel, message)

        self._total_updates += 1
        self._updates_per_courier[stored.courier_id] = self._updates_per_courier.get(stored.courier_id, 0) + 1

        await log_info(
            f"Location {stored.id} of courier {stored.courier_id} stored, sent to {delivered} admin connections",
            type_msg=TypeMsg.DEBUG,
            logger_name=LOGGER_NAME,
        )
        return stored

    async def rebuild_projection(self) -> bool:
        """
        Rebuilds the projection from the store.

        Returns:
            False if the store could not be read; the projection keeps what it had
        """
        try:
            await self._projector.rebuild(self._store)
        except StoreError as e:
            await log_warning(f"Projection rebuild failed, serving cached positions: {e}", logger_name=LOGGER_NAME)
            return False
        return True

    def get_stats(self) -> dict[str, Any]:
        return {
            "total_updates": self._total_updates,
            "rejected_updates": self._rejected_updates,
            "store_failures": self._store_failures,
            "unique_couriers": len(self._updates_per_courier),
            "projected_couriers": len(self._projector),
        }
