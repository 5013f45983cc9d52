from fastapi import APIRouter, Depends

from courier_tracker import __version__
from courier_tracker.infra.database import DatabaseManager, get_db
from courier_tracker.shared.models.common import HealthStatus

router = APIRouter(prefix="/api", tags=["health"])


def get_database() -> DatabaseManager:
    return get_db()


@router.get("/health", response_model=HealthStatus)
async def health_check(db: DatabaseManager = Depends(get_database)):
    """Liveness plus a database round trip."""
    database_ok = db.is_connected and await db.health_check()
    return HealthStatus(
        service="courier_tracker",
        status="healthy" if database_ok else "degraded",
        message="Server running",
        version=__version__,
        database=database_ok,
    )
