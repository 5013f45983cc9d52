from typing import List, Optional

from courier_tracker.common.constants import CourierStatus
from courier_tracker.common.logger import log_info, TypeMsg
from courier_tracker.services.users.repository import UserRepository
from courier_tracker.shared.models.user import CreateCourierRequest, UserDTO


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def login(self, username: str, password: str) -> Optional[UserDTO]:
        """
        Credential lookup for the dashboard and the courier app.
        No session or token is issued.
        """
        user = await self.repository.get_user_by_credentials(username, password)
        if user is None:
            await log_info(f"Failed login for {username}", type_msg=TypeMsg.WARNING, logger_name="users")
        return user

    async def list_couriers(self) -> List[UserDTO]:
        return await self.repository.get_couriers()

    async def list_available_couriers(self) -> List[UserDTO]:
        return await self.repository.get_couriers(status=CourierStatus.AVAILABLE)

    async def create_courier(self, data: CreateCourierRequest) -> UserDTO:
        user = await self.repository.create_user(data)
        await log_info(f"Courier {user.id} ({user.username}) created", type_msg=TypeMsg.INFO, logger_name="users")
        return user

    async def change_status(self, user_id: int, status: CourierStatus) -> Optional[UserDTO]:
        """Sets a courier's availability. None if no courier has this id."""
        user = await self.repository.update_courier_status(user_id, status)
        if user is not None:
            await log_info(f"Courier {user_id} is now {status.value}", type_msg=TypeMsg.INFO, logger_name="users")
        return user
