from fastapi import Depends

from courier_tracker.core.tracking.context import TrackingContext
from courier_tracker.services.locations.service import LocationQueryService
from courier_tracker.services.realtime_ws.dependencies import get_tracking_context
from courier_tracker.services.users.dependencies import get_user_repository
from courier_tracker.services.users.repository import UserRepository


def get_location_service(
    context: TrackingContext = Depends(get_tracking_context),
    users: UserRepository = Depends(get_user_repository),
) -> LocationQueryService:
    return LocationQueryService(context.store, context.projector, users)
