from typing import List

import asyncpg
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse

from courier_tracker.services.packages.dependencies import get_package_service
from courier_tracker.services.packages.service import PackageService
from courier_tracker.shared.models.package import (
    AssignPackageRequest,
    CreatePackageRequest,
    MapDataResponse,
    PackageDTO,
    UpdatePackageRequest,
    UpdatePackageStatusRequest,
)

router = APIRouter(prefix="/api", tags=["packages"])

UNKNOWN_COURIER = "Courier not found"


@router.get("/packages", response_model=List[PackageDTO])
async def list_packages(service: PackageService = Depends(get_package_service)):
    return await service.list_packages()


@router.post("/packages", response_model=PackageDTO, status_code=status.HTTP_201_CREATED)
async def create_package(
    data: CreatePackageRequest,
    service: PackageService = Depends(get_package_service)
):
    try:
        return await service.create_package(data)
    except asyncpg.ForeignKeyViolationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=UNKNOWN_COURIER)


@router.get("/packages/{package_id}", response_model=PackageDTO)
async def get_package(
    package_id: int,
    service: PackageService = Depends(get_package_service)
):
    package = await service.get_package(package_id)
    if not package:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return package


@router.put("/packages/{package_id}", response_model=PackageDTO)
async def update_package(
    package_id: int,
    data: UpdatePackageRequest,
    service: PackageService = Depends(get_package_service)
):
    try:
        package = await service.update_package(package_id, data)
    except asyncpg.ForeignKeyViolationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=UNKNOWN_COURIER)
    if not package:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return package


@router.put("/packages/{package_id}/status", response_model=PackageDTO)
async def change_package_status(
    package_id: int,
    request: UpdatePackageStatusRequest,
    service: PackageService = Depends(get_package_service)
):
    package = await service.change_status(package_id, request.status)
    if not package:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return package


@router.put("/packages/{package_id}/assign", response_model=PackageDTO)
async def assign_package(
    package_id: int,
    request: AssignPackageRequest,
    service: PackageService = Depends(get_package_service)
):
    try:
        package = await service.assign(package_id, request.delivery_person_id)
    except asyncpg.ForeignKeyViolationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=UNKNOWN_COURIER)
    if not package:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return package


@router.delete("/packages/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_package(
    package_id: int,
    service: PackageService = Depends(get_package_service)
):
    if not await service.delete_package(package_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# === LEGACY ===

@router.get("/map-data", response_model=MapDataResponse)
async def get_map_data(service: PackageService = Depends(get_package_service)):
    return await service.get_map_data()


@router.get("/locations", include_in_schema=False)
async def legacy_locations():
    return RedirectResponse(url="/api/packages", status_code=status.HTTP_302_FOUND)
