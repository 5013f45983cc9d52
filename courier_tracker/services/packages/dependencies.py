from courier_tracker.infra.database import get_db
from courier_tracker.services.packages.repository import PackageRepository
from courier_tracker.services.packages.service import PackageService


def get_package_repository() -> PackageRepository:
    return PackageRepository(get_db())


def get_package_service() -> PackageService:
    return PackageService(get_package_repository())
