from typing import List

import asyncpg
from fastapi import APIRouter, Depends, HTTPException, status

from courier_tracker.services.users.dependencies import get_user_service
from courier_tracker.services.users.service import UserService
from courier_tracker.shared.models.user import (
    CreateCourierRequest,
    LoginRequest,
    LoginResponse,
    UpdateCourierStatusRequest,
    UserDTO,
)

router = APIRouter(prefix="/api", tags=["users"])


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    service: UserService = Depends(get_user_service)
):
    user = await service.login(credentials.username, credentials.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return LoginResponse(user=user)


@router.get("/deliveries", response_model=List[UserDTO])
async def list_couriers(service: UserService = Depends(get_user_service)):
    return await service.list_couriers()


@router.post("/deliveries", response_model=UserDTO, status_code=status.HTTP_201_CREATED)
async def create_courier(
    data: CreateCourierRequest,
    service: UserService = Depends(get_user_service)
):
    try:
        return await service.create_courier(data)
    except asyncpg.UniqueViolationError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")


@router.get("/deliveries/available", response_model=List[UserDTO])
async def list_available_couriers(service: UserService = Depends(get_user_service)):
    return await service.list_available_couriers()


@router.put("/deliveries/{user_id}/status", response_model=UserDTO)
async def change_courier_status(
    user_id: int,
    request: UpdateCourierStatusRequest,
    service: UserService = Depends(get_user_service)
):
    user = await service.change_status(user_id, request.status)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Courier not found")
    return user
