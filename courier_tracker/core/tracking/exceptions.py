# courier_tracker/core/tracking/exceptions.py
"""
Errors raised by the real-time tracking core.
"""

from __future__ import annotations

from typing import Any


class TrackingError(Exception):
    """Base class for tracking errors."""


class StoreError(TrackingError):
    """The location store could not record or read samples."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class IngestError(TrackingError):
    """An inbound location event was rejected."""


class MalformedPayloadError(IngestError):
    """The event lacks a courier id or usable coordinates."""

    def __init__(self, message: str, payload: Any = None, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.payload = payload
        self.errors = errors or []
