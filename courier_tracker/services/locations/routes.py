from typing import List

from fastapi import APIRouter, Depends

from courier_tracker.services.locations.dependencies import get_location_service
from courier_tracker.services.locations.service import LocationQueryService
from courier_tracker.shared.models.location import LatestLocationResponse

router = APIRouter(prefix="/api", tags=["locations"])


@router.get("/delivery-locations/latest", response_model=List[LatestLocationResponse])
async def latest_locations(service: LocationQueryService = Depends(get_location_service)):
    """Latest known position of every courier."""
    return await service.latest_positions()
