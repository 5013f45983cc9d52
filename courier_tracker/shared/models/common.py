# courier_tracker/shared/models/common.py
"""
Models shared by every router.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error body."""

    error_code: str
    message: str
    details: dict[str, Any] | None = None


class HealthStatus(BaseModel):
    """Service health."""

    service: str
    status: str = "healthy"  # healthy, degraded
    message: str | None = None
    version: str | None = None
    database: bool = False
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
