from typing import Any, List, Optional

from courier_tracker.common.constants import PackageStatus
from courier_tracker.infra.database import DatabaseManager
from courier_tracker.shared.models.package import (
    CreatePackageRequest,
    PackageCourierDTO,
    PackageDTO,
)

PACKAGE_SELECT = """
    SELECT
        p.id, p.recipient, p.address, p.delivery_person_id, p.status,
        p.created_at, p.updated_at,
        u.id AS courier_id, u.name AS courier_name, u.username AS courier_username
    FROM packages p
    LEFT JOIN users u ON u.id = p.delivery_person_id
"""


def _to_package(record: Any) -> PackageDTO:
    row = dict(record)
    courier_id = row.pop("courier_id", None)
    courier_name = row.pop("courier_name", None)
    courier_username = row.pop("courier_username", None)
    courier = None
    if courier_id is not None:
        courier = PackageCourierDTO(id=courier_id, name=courier_name, username=courier_username)
    return PackageDTO(**row, courier=courier)


class PackageRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_packages(self) -> List[PackageDTO]:
        """All packages, newest first, with their assigned courier."""
        query = PACKAGE_SELECT + " ORDER BY p.created_at DESC, p.id DESC"
        async with self.db.acquire() as conn:
            records = await conn.fetch(query)
            return [_to_package(r) for r in records]

    async def get_package(self, package_id: int) -> Optional[PackageDTO]:
        query = PACKAGE_SELECT + " WHERE p.id = $1"
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, package_id)
            if record:
                return _to_package(record)
            return None

    async def create_package(self, package: CreatePackageRequest) -> int:
        query = """
            INSERT INTO packages (recipient, address, delivery_person_id, status)
            VALUES ($1, $2, $3, $4)
            RETURNING id
        """
        async with self.db.acquire() as conn:
            return await conn.fetchval(
                query,
                package.recipient,
                package.address,
                package.delivery_person_id,
                package.status.value,
            )

    async def update_package(self, package_id: int, fields: dict[str, Any]) -> bool:
        """
        Writes the given columns. Returns False if the package does not exist.
        Column names come from UpdatePackageRequest, never from the client.
        """
        if not fields:
            async with self.db.acquire() as conn:
                return await conn.fetchval("SELECT EXISTS(SELECT 1 FROM packages WHERE id = $1)", package_id)

        assignments = [f"{column} = ${i}" for i, column in enumerate(fields, start=2)]
        query = f"""
            UPDATE packages
            SET {", ".join(assignments)}, updated_at = NOW()
            WHERE id = $1
            RETURNING id
        """
        async with self.db.acquire() as conn:
            updated = await conn.fetchval(query, package_id, *fields.values())
            return updated is not None

    async def assign_package(self, package_id: int, courier_id: int) -> bool:
        query = """
            UPDATE packages
            SET delivery_person_id = $2, status = $3, updated_at = NOW()
            WHERE id = $1
            RETURNING id
        """
        async with self.db.acquire() as conn:
            updated = await conn.fetchval(query, package_id, courier_id, PackageStatus.ASSIGNED.value)
            return updated is not None

    async def delete_package(self, package_id: int) -> bool:
        async with self.db.acquire() as conn:
            deleted = await conn.fetchval("DELETE FROM packages WHERE id = $1 RETURNING id", package_id)
            return deleted is not None
