"""Reconciled vehicle positions and the published cache snapshot."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from pygrandlyon.ingestion.normalize import duration_magnitude_seconds
from pygrandlyon.models.siri import VehicleActivity


class FeedStatus(StrEnum):
    """Outcome of the refresh that produced a snapshot."""

    PENDING = "PENDING"
    OK = "OK"
    NO_DATA = "NO_DATA"
    ERROR = "API_DOWN"


class _OutboundModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class VehiclePosition(_OutboundModel):
    """One reconciled observation of a transit vehicle.

    Serialized with camelCase keys (``vehicleId``, ``recordedAtTime``...).
    ``latitude``/``longitude`` default to ``0.0`` when the feed omits the
    location; every other field is ``None`` when absent or unparseable.
    """

    vehicle_id: str | None = None
    line_id: str | None = None
    direction: str | None = None
    latitude: float = 0.0
    longitude: float = 0.0
    delay: str | None = None
    """Upstream ISO-8601 duration, kept verbatim (e.g. ``"PT30S"``)."""
    recorded_at_time: datetime | None = None
    valid_until_time: datetime | None = None
    destination_name: str | None = None
    data_source: str | None = None
    bearing: float | None = None
    vehicle_status: str | None = None

    @classmethod
    def from_activity(cls, activity: VehicleActivity) -> VehiclePosition:
        journey = activity.monitored_vehicle_journey
        location = journey.vehicle_location
        return cls(
            vehicle_id=journey.vehicle_id,
            line_id=journey.line_id,
            direction=journey.direction,
            latitude=location.latitude if location is not None else 0.0,
            longitude=location.longitude if location is not None else 0.0,
            delay=journey.delay,
            recorded_at_time=activity.recorded_at_time,
            valid_until_time=activity.valid_until_time,
            destination_name=journey.destination,
            data_source=journey.data_source,
            bearing=journey.bearing,
            vehicle_status=journey.vehicle_status,
        )

    @property
    def delay_seconds(self) -> float | None:
        """Absolute delay in seconds, ``None`` when absent or unparseable."""
        return duration_magnitude_seconds(self.delay)


class CacheSnapshot(_OutboundModel):
    """Externally visible cache state, replaced wholesale on every refresh."""

    vehicles: tuple[VehiclePosition, ...] = ()
    api_response_timestamp: datetime | None = None
    last_fetch_time: datetime | None = None
    api_status: FeedStatus = FeedStatus.PENDING

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys and ISO-8601 timestamps."""
        return self.model_dump(mode="json", by_alias=True)
