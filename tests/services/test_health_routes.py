# tests/services/test_health_routes.py
"""
Tests for /api/health.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from courier_tracker.app import create_app
from courier_tracker.core.tracking.context import TrackingContext
from courier_tracker.services.health.routes import get_database


def health_client(tracking_context: TrackingContext, db: MagicMock) -> TestClient:
    app = create_app(tracking_context)
    app.dependency_overrides[get_database] = lambda: db
    return TestClient(app)


class TestHealth:
    """Liveness plus database round trip."""

    def test_healthy(self, tracking_context: TrackingContext, mock_db: MagicMock) -> None:
        response = health_client(tracking_context, mock_db).get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] is True
        assert body["message"] == "Server running"
        assert "timestamp" in body

    def test_database_down(self, tracking_context: TrackingContext, mock_db: MagicMock) -> None:
        mock_db.health_check = AsyncMock(return_value=False)

        body = health_client(tracking_context, mock_db).get("/api/health").json()

        assert body["status"] == "degraded"
        assert body["database"] is False

    def test_not_connected(self, tracking_context: TrackingContext, mock_db: MagicMock) -> None:
        mock_db.is_connected = False

        body = health_client(tracking_context, mock_db).get("/api/health").json()

        assert body["database"] is False
        mock_db.health_check.assert_not_called()
