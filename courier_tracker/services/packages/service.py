from datetime import datetime, timezone
from typing import List, Optional

from courier_tracker.common.constants import PackageStatus
from courier_tracker.common.logger import log_info, TypeMsg
from courier_tracker.services.packages.repository import PackageRepository
from courier_tracker.shared.models.package import (
    CreatePackageRequest,
    MapDataResponse,
    PackageDTO,
    UpdatePackageRequest,
)


class PackageService:
    def __init__(self, repository: PackageRepository):
        self.repository = repository

    async def list_packages(self) -> List[PackageDTO]:
        return await self.repository.get_packages()

    async def get_package(self, package_id: int) -> Optional[PackageDTO]:
        return await self.repository.get_package(package_id)

    async def create_package(self, data: CreatePackageRequest) -> PackageDTO:
        package_id = await self.repository.create_package(data)
        await log_info(f"Package {package_id} created for {data.recipient}", type_msg=TypeMsg.INFO, logger_name="packages")
        return await self.repository.get_package(package_id)

    async def update_package(self, package_id: int, data: UpdatePackageRequest) -> Optional[PackageDTO]:
        """Partial update. None if the package does not exist."""
        fields = data.model_dump(exclude_unset=True, mode="json")
        if not await self.repository.update_package(package_id, fields):
            return None
        return await self.repository.get_package(package_id)

    async def change_status(self, package_id: int, status: PackageStatus) -> Optional[PackageDTO]:
        if not await self.repository.update_package(package_id, {"status": status.value}):
            return None
        await log_info(f"Package {package_id} is now {status.value}", type_msg=TypeMsg.INFO, logger_name="packages")
        return await self.repository.get_package(package_id)

    async def assign(self, package_id: int, courier_id: int) -> Optional[PackageDTO]:
        """Hands the package to a courier and marks it assigned."""
        if not await self.repository.assign_package(package_id, courier_id):
            return None
        await log_info(f"Package {package_id} assigned to courier {courier_id}", type_msg=TypeMsg.INFO, logger_name="packages")
        return await self.repository.get_package(package_id)

    async def delete_package(self, package_id: int) -> bool:
        deleted = await self.repository.delete_package(package_id)
        if deleted:
            await log_info(f"Package {package_id} deleted", type_msg=TypeMsg.INFO, logger_name="packages")
        return deleted

    async def get_map_data(self) -> MapDataResponse:
        """Legacy dashboard payload: every package plus a server timestamp."""
        return MapDataResponse(
            message="Map data (legacy)",
            packages=await self.repository.get_packages(),
            timestamp=datetime.now(timezone.utc),
        )
