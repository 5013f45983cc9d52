from typing import Iterable, List, Optional

from courier_tracker.common.constants import CourierStatus, UserRole
from courier_tracker.infra.database import DatabaseManager
from courier_tracker.shared.models.user import CreateCourierRequest, UserDTO

USER_COLUMNS = "id, username, name, role, status, created_at, updated_at"


class UserRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_user_by_id(self, user_id: int) -> Optional[UserDTO]:
        query = f"SELECT {USER_COLUMNS} FROM users WHERE id = $1"
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, user_id)
            if record:
                return UserDTO(**dict(record))
            return None

    async def get_user_by_credentials(self, username: str, password: str) -> Optional[UserDTO]:
        """Plain lookup by username and password."""
        query = f"""
            SELECT {USER_COLUMNS}
            FROM users
            WHERE username = $1 AND password = $2
        """
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, username, password)
            if record:
                return UserDTO(**dict(record))
            return None

    async def get_users_by_ids(self, user_ids: Iterable[int]) -> List[UserDTO]:
        ids = sorted(set(user_ids))
        if not ids:
            return []
        query = f"SELECT {USER_COLUMNS} FROM users WHERE id = ANY($1::bigint[])"
        async with self.db.acquire() as conn:
            records = await conn.fetch(query, ids)
            return [UserDTO(**dict(record)) for record in records]

    async def get_couriers(self, status: Optional[CourierStatus] = None) -> List[UserDTO]:
        """Couriers ordered by name, optionally filtered by status."""
        if status is None:
            query = f"SELECT {USER_COLUMNS} FROM users WHERE role = $1 ORDER BY name NULLS LAST, id"
            args: tuple = (UserRole.DELIVERY.value,)
        else:
            query = f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE role = $1 AND status = $2
                ORDER BY name NULLS LAST, id
            """
            args = (UserRole.DELIVERY.value, status.value)
        async with self.db.acquire() as conn:
            records = await conn.fetch(query, *args)
            return [UserDTO(**dict(record)) for record in records]

    async def create_user(self, user: CreateCourierRequest) -> UserDTO:
        query = f"""
            INSERT INTO users (username, password, name, role, status)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING {USER_COLUMNS}
        """
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(
                query,
                user.username,
                user.password,
                user.name,
                user.role.value,
                user.status.value,
            )
            return UserDTO(**dict(record))

    async def update_courier_status(self, user_id: int, status: CourierStatus) -> Optional[UserDTO]:
        query = f"""
            UPDATE users
            SET status = $2, updated_at = NOW()
            WHERE id = $1 AND role = $3
            RETURNING {USER_COLUMNS}
        """
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, user_id, status.value, UserRole.DELIVERY.value)
            if record:
                return UserDTO(**dict(record))
            return None
