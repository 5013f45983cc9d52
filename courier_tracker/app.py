# courier_tracker/app.py
"""
FastAPI application: REST API plus the live tracking WebSocket.

WebSocket:
- /ws -- courier position streaming, admin fan-out

REST:
- /api/health
- /api/auth/login, /api/deliveries...
- /api/packages..., /api/map-data, /api/locations
- /api/delivery-locations/latest
- /ws/stats
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import asyncpg
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from courier_tracker import __version__
from courier_tracker.common.constants import TypeMsg
from courier_tracker.common.logger import log_error, log_info, setup_logging
from courier_tracker.config import settings
from courier_tracker.core.tracking.context import TrackingContext, build_tracking_context
from courier_tracker.core.tracking.store import PostgresLocationStore
from courier_tracker.infra.database import close_db, init_db
from courier_tracker.services.health.routes import router as health_router
from courier_tracker.services.locations.routes import router as locations_router
from courier_tracker.services.packages.routes import router as packages_router
from courier_tracker.services.realtime_ws.gateway import router as realtime_router
from courier_tracker.services.users.routes import router as users_router
from courier_tracker.shared.models.common import ErrorResponse


async def startup_tracking() -> TrackingContext:
    """Connects the database and warms the latest-position projection."""
    db = await init_db()
    context = build_tracking_context(
        PostgresLocationStore(db),
        admin_channel=settings.tracking.ADMIN_CHANNEL,
        courier_channel_prefix=settings.tracking.COURIER_CHANNEL_PREFIX,
        send_queue_size=settings.tracking.SEND_QUEUE_SIZE,
        drain_timeout=settings.tracking.DRAIN_TIMEOUT,
    )
    if settings.tracking.REBUILD_ON_STARTUP:
        await context.coordinator.rebuild_projection()
    return context


def create_app(context: TrackingContext | None = None) -> FastAPI:
    """
    Builds the application.

    Args:
        context: Ready tracking context. When given, the lifespan neither
            connects the database nor closes it.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        owns_database = context is None
        if owns_database:
            setup_logging()
            await log_info(f"Starting {settings.system.PROJECT_NAME} {__version__}...", type_msg=TypeMsg.INFO)
            app.state.tracking = await startup_tracking()
        else:
            app.state.tracking = context

        yield

        # Shutdown
        if owns_database:
            await log_info("Shutting down...", type_msg=TypeMsg.INFO)
            await close_db()

    app = FastAPI(
        title="Courier Tracker",
        description="Delivery management API with live courier tracking.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    if context is not None:
        app.state.tracking = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.deployment.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(asyncpg.PostgresError)
    async def database_error_handler(request: Request, exc: asyncpg.PostgresError) -> JSONResponse:
        await log_error(f"Database error on {request.method} {request.url.path}: {exc}", logger_name="api")
        body = ErrorResponse(error_code="database_error", message=str(exc))
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(packages_router)
    app.include_router(locations_router)
    app.include_router(realtime_router)

    return app


app = create_app()
