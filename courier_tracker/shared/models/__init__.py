"""
Pydantic models shared by the API and the tracking core.
"""

from courier_tracker.shared.models.common import ErrorResponse, HealthStatus
from courier_tracker.shared.models.location import (
    PositionSample,
    StoredSample,
    LocationUpdatePayload,
    DeliveryLocationUpdate,
    CourierIdentity,
    LatestLocationResponse,
)
from courier_tracker.shared.models.user import (
    UserDTO,
    CreateCourierRequest,
    UpdateCourierStatusRequest,
    LoginRequest,
    LoginResponse,
)
from courier_tracker.shared.models.package import (
    PackageDTO,
    PackageCourierDTO,
    CreatePackageRequest,
    UpdatePackageRequest,
    UpdatePackageStatusRequest,
    AssignPackageRequest,
    MapDataResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    "HealthStatus",
    # Location
    "PositionSample",
    "StoredSample",
    "LocationUpdatePayload",
    "DeliveryLocationUpdate",
    "CourierIdentity",
    "LatestLocationResponse",
    # Users
    "UserDTO",
    "CreateCourierRequest",
    "UpdateCourierStatusRequest",
    "LoginRequest",
    "LoginResponse",
    # Packages
    "PackageDTO",
    "PackageCourierDTO",
    "CreatePackageRequest",
    "UpdatePackageRequest",
    "UpdatePackageStatusRequest",
    "AssignPackageRequest",
    "MapDataResponse",
]
