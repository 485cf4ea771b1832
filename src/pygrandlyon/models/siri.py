"""Upstream SIRI VehicleMonitoring schema.

Only the subset of the feed this service reads is modelled. Every field is
optional; malformed nested references degrade to ``None`` instead of
invalidating the enclosing record. The one exception is ``VehicleRef``: a
vehicle reference that is present but not a scalar or ``{"value": scalar}``
object fails validation of the whole :class:`VehicleActivity`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator, model_validator

from pygrandlyon.ingestion.normalize import parse_instant, safe_float, safe_str
from pygrandlyon.models._base import SiriBaseModel, lenient


class ValueRef(SiriBaseModel):
    """A ``{"value": ...}`` reference (``LineRef``, ``VehicleRef``...)."""

    value: str | None = Field(default=None, alias="value")

    @model_validator(mode="before")
    @classmethod
    def _wrap_scalar(cls, values: Any) -> Any:
        # Some producers send the bare identifier instead of an object.
        if isinstance(values, (str, int, float)) and not isinstance(values, bool):
            return {"value": values}
        return values

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> str | None:
        if isinstance(value, (dict, list, bool)):
            raise ValueError("reference value must be a scalar")
        return safe_str(value)


class VehicleLocation(SiriBaseModel):
    longitude: float = 0.0
    latitude: float = 0.0

    @field_validator("longitude", "latitude", mode="before")
    @classmethod
    def _coerce_degrees(cls, value: Any) -> float:
        parsed = safe_float(value)
        return parsed if parsed is not None else 0.0


class MonitoredVehicleJourney(SiriBaseModel):
    line_ref: ValueRef | None = None
    direction_ref: ValueRef | None = None
    vehicle_location: VehicleLocation | None = None
    vehicle_ref: ValueRef | None = None
    destination_ref: ValueRef | None = None
    data_source: str | None = None
    bearing: float | None = None
    vehicle_status: str | None = None
    delay: str | None = None

    @field_validator("line_ref", "direction_ref", "destination_ref", mode="before")
    @classmethod
    def _lenient_ref(cls, value: Any) -> ValueRef | None:
        return lenient(ValueRef, value)

    @field_validator("vehicle_location", mode="before")
    @classmethod
    def _lenient_location(cls, value: Any) -> VehicleLocation | None:
        return lenient(VehicleLocation, value)

    @field_validator("data_source", "vehicle_status", "delay", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("bearing", mode="before")
    @classmethod
    def _coerce_bearing(cls, value: Any) -> float | None:
        return safe_float(value)

    @property
    def vehicle_id(self) -> str | None:
        return self.vehicle_ref.value if self.vehicle_ref is not None else None

    @property
    def line_id(self) -> str | None:
        return self.line_ref.value if self.line_ref is not None else None

    @property
    def direction(self) -> str | None:
        return self.direction_ref.value if self.direction_ref is not None else None

    @property
    def destination(self) -> str | None:
        return self.destination_ref.value if self.destination_ref is not None else None


class VehicleActivity(SiriBaseModel):
    recorded_at_time: datetime | None = None
    valid_until_time: datetime | None = None
    monitored_vehicle_journey: MonitoredVehicleJourney

    @field_validator("recorded_at_time", "valid_until_time", mode="before")
    @classmethod
    def _coerce_instant(cls, value: Any) -> datetime | None:
        return parse_instant(value)


class VehicleMonitoringDelivery(SiriBaseModel):
    """One delivery block.

    Activities are kept as raw dicts so each one can be validated (and
    dropped) on its own.
    """

    vehicle_activity: list[Any] = Field(default_factory=list)

    @field_validator("vehicle_activity", mode="before")
    @classmethod
    def _ensure_list(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else []


class ServiceDelivery(SiriBaseModel):
    response_timestamp: datetime | None = None
    vehicle_monitoring_delivery: list[VehicleMonitoringDelivery] | None = None

    @field_validator("response_timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_instant(value)

    @field_validator("vehicle_monitoring_delivery", mode="before")
    @classmethod
    def _drop_malformed_blocks(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        blocks = (lenient(VehicleMonitoringDelivery, block) for block in value)
        return [block for block in blocks if block is not None]


class Siri(SiriBaseModel):
    service_delivery: ServiceDelivery | None = None


class SiriResponse(SiriBaseModel):
    """Top-level ``{"Siri": {...}}`` document."""

    siri: Siri | None = None

    @property
    def service_delivery(self) -> ServiceDelivery | None:
        return self.siri.service_delivery if self.siri is not None else None

    @property
    def response_timestamp(self) -> datetime | None:
        delivery = self.service_delivery
        return delivery.response_timestamp if delivery is not None else None

    @property
    def deliveries(self) -> list[VehicleMonitoringDelivery] | None:
        """Delivery blocks, or ``None`` when the container is missing."""
        delivery = self.service_delivery
        return delivery.vehicle_monitoring_delivery if delivery is not None else None
