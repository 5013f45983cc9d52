# courier_tracker/common/constants.py
"""
Shared constants and enumerations.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Log message types."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class UserRole(str, Enum):
    """User roles stored in the users table."""
    ADMIN = "admin"
    DELIVERY = "delivery"


class CourierStatus(str, Enum):
    """Courier availability."""
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"


class PackageStatus(str, Enum):
    """Package lifecycle statuses."""
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class WsEvent(str, Enum):
    """WebSocket event names (the `event` field of every frame)."""
    JOIN_COURIER_CHANNEL = "join-courier-channel"
    JOIN_ADMIN_CHANNEL = "join-admin-channel"
    # names used by older clients
    JOIN_DELIVERY = "join-delivery"
    JOIN_ADMIN = "join-admin"
    LOCATION_UPDATE = "location-update"
    PING = "ping"
    # server -> client
    JOINED = "joined"
    PONG = "pong"
    DELIVERY_LOCATION_UPDATE = "delivery-location-update"
