"""
Real-time courier location distribution.

- store: append-only sample log (PostgreSQL)
- projector: latest position per courier
- registry: channel membership and fan-out
- coordinator: ingestion facade for connections
"""

from courier_tracker.core.tracking.exceptions import (
    TrackingError,
    StoreError,
    IngestError,
    MalformedPayloadError,
)
from courier_tracker.core.tracking.store import LocationStore, PostgresLocationStore
from courier_tracker.core.tracking.projector import LatestPositionProjector, latest_per_courier
from courier_tracker.core.tracking.registry import Subscriber, SubscriptionRegistry
from courier_tracker.core.tracking.coordinator import IngestionCoordinator, parse_location_update
from courier_tracker.core.tracking.context import TrackingContext, build_tracking_context

__all__ = [
    "TrackingError",
    "StoreError",
    "IngestError",
    "MalformedPayloadError",
    "LocationStore",
    "PostgresLocationStore",
    "LatestPositionProjector",
    "latest_per_courier",
    "Subscriber",
    "SubscriptionRegistry",
    "IngestionCoordinator",
    "parse_location_update",
    "TrackingContext",
    "build_tracking_context",
]
