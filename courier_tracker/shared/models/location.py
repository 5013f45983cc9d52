# courier_tracker/shared/models/location.py
"""
Courier position models.

PositionSample  -- one inbound sample, before it is stored
StoredSample    -- the same sample after the store assigned an id and time
LocationUpdatePayload  -- wire payload of a `location-update` event
DeliveryLocationUpdate -- wire payload fanned out to the admin channel
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def normalize_courier_id(value: Any) -> Any:
    # ids arrive as numbers or strings depending on the client
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(int(value)) if float(value).is_integer() else str(value)
    if isinstance(value, str):
        return value.strip()
    return value


class PositionSample(BaseModel):
    """One courier position at a point in time."""

    model_config = ConfigDict(frozen=True)

    courier_id: str = Field(..., min_length=1)
    latitude: float
    longitude: float
    accuracy: float | None = None
    speed: float | None = None
    recorded_at: datetime | None = None

    @field_validator("courier_id", mode="before")
    @classmethod
    def normalize_courier_id(cls, v: Any) -> Any:
        return normalize_courier_id(v)


class StoredSample(PositionSample):
    """A durably recorded sample."""

    id: int
    recorded_at: datetime

    @classmethod
    def from_record(cls, record: Any) -> "StoredSample":
        """Builds a sample from a delivery_locations row."""
        row = dict(record)
        return cls(
            id=row["id"],
            courier_id=row["delivery_person_id"],
            latitude=row["latitude"],
            longitude=row["longitude"],
            accuracy=row.get("accuracy"),
            speed=row.get("speed"),
            recorded_at=row["timestamp"],
        )

    def is_newer_than(self, other: "StoredSample") -> bool:
        return self.recorded_at > other.recorded_at


class LocationUpdatePayload(BaseModel):
    """
    Body of a `location-update` event.

    `deliveryId` is accepted as an alias of `courierId`. Coordinates are
    taken as given, no range check.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    courier_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("courierId", "deliveryId", "courier_id"),
    )
    latitude: float
    longitude: float
    accuracy: float | None = None
    speed: float | None = None

    @field_validator("courier_id", mode="before")
    @classmethod
    def normalize_courier_id(cls, v: Any) -> Any:
        return normalize_courier_id(v)

    @field_validator("latitude", "longitude", "accuracy", "speed", mode="before")
    @classmethod
    def reject_booleans(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("coordinates must be numbers")
        return v

    def to_sample(self, recorded_at: datetime) -> PositionSample:
        return PositionSample(
            courier_id=self.courier_id,
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
            speed=self.speed,
            recorded_at=recorded_at,
        )


class DeliveryLocationUpdate(BaseModel):
    """Payload of `delivery-location-update` sent to admin connections."""

    model_config = ConfigDict(populate_by_name=True)

    courier_id: str = Field(..., serialization_alias="courierId")
    latitude: float
    longitude: float
    timestamp: datetime
    accuracy: float | None = None
    speed: float | None = None

    @classmethod
    def from_sample(cls, sample: StoredSample) -> "DeliveryLocationUpdate":
        return cls(
            courier_id=sample.courier_id,
            latitude=sample.latitude,
            longitude=sample.longitude,
            timestamp=sample.recorded_at,
            accuracy=sample.accuracy,
            speed=sample.speed,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CourierIdentity(BaseModel):
    """Courier fields joined onto a latest position."""

    id: int
    name: str | None = None
    status: str | None = None


class LatestLocationResponse(BaseModel):
    """One row of GET /api/delivery-locations/latest."""

    id: int
    delivery_person_id: str
    latitude: float
    longitude: float
    accuracy: float | None = None
    speed: float | None = None
    timestamp: datetime
    courier: CourierIdentity | None = None
