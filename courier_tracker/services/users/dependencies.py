from courier_tracker.infra.database import DatabaseManager, get_db
from courier_tracker.services.users.repository import UserRepository
from courier_tracker.services.users.service import UserService


def get_database() -> DatabaseManager:
    return get_db()


def get_user_repository() -> UserRepository:
    return UserRepository(get_database())


def get_user_service() -> UserService:
    return UserService(get_user_repository())
