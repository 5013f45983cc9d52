from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from courier_tracker.common.constants import PackageStatus


class PackageCourierDTO(BaseModel):
    """Assigned courier as embedded in a package."""
    id: int
    name: Optional[str] = None
    username: Optional[str] = None


class PackageDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient: str
    address: str
    delivery_person_id: Optional[int] = None
    status: str = PackageStatus.PENDING.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    courier: Optional[PackageCourierDTO] = None


class CreatePackageRequest(BaseModel):
    recipient: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    delivery_person_id: Optional[int] = None
    status: PackageStatus = PackageStatus.PENDING


class UpdatePackageRequest(BaseModel):
    """Partial update; only the fields that were sent are written."""
    recipient: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = Field(default=None, min_length=1)
    delivery_person_id: Optional[int] = None
    status: Optional[PackageStatus] = None


class UpdatePackageStatusRequest(BaseModel):
    status: PackageStatus


class AssignPackageRequest(BaseModel):
    delivery_person_id: int


class MapDataResponse(BaseModel):
    message: str
    packages: list[PackageDTO]
    timestamp: datetime
