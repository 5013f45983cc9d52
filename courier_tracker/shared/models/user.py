from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from courier_tracker.common.constants import CourierStatus, UserRole


class UserDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: Optional[str] = None
    role: str = UserRole.DELIVERY.value
    status: str = CourierStatus.OFFLINE.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreateCourierRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    name: Optional[str] = None
    role: UserRole = UserRole.DELIVERY
    status: CourierStatus = CourierStatus.OFFLINE


class UpdateCourierStatusRequest(BaseModel):
    status: CourierStatus


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    user: UserDTO
