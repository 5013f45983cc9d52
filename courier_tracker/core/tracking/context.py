# courier_tracker/core/tracking/context.py
"""
Process-scoped tracking state.

Built once at startup and stored on the application; nothing in the tracking
core is module-global.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from courier_tracker.core.tracking.coordinator import IngestionCoordinator
from courier_tracker.core.tracking.projector import LatestPositionProjector
from courier_tracker.core.tracking.registry import SubscriptionRegistry
from courier_tracker.core.tracking.store import LocationStore, utcnow


@dataclass
class TrackingContext:
    """Store, projection, channels and the coordinator over them."""
    store: LocationStore
    projector: LatestPositionProjector
    registry: SubscriptionRegistry
    coordinator: IngestionCoordinator
    send_queue_size: int = 100
    drain_timeout: float = 5.0


def build_tracking_context(
    store: LocationStore,
    *,
    admin_channel: str = "admin",
    courier_channel_prefix: str = "delivery-",
    send_queue_size: int = 100,
    drain_timeout: float = 5.0,
    clock: Callable[[], datetime] = utcnow,
) -> TrackingContext:
    """Wires a context around the given store."""
    projector = LatestPositionProjector()
    registry = SubscriptionRegistry(
        admin_channel=admin_channel,
        courier_channel_prefix=courier_channel_prefix,
    )
    coordinator = IngestionCoordinator(store, projector, registry, clock=clock)
    return TrackingContext(
        store=store,
        projector=projector,
        registry=registry,
        coordinator=coordinator,
        send_queue_size=send_queue_size,
        drain_timeout=drain_timeout,
    )
