"""Data models for the upstream feed and the published snapshot."""

from pygrandlyon.models._base import SiriBaseModel
from pygrandlyon.models.siri import (
    MonitoredVehicleJourney,
    ServiceDelivery,
    Siri,
    SiriResponse,
    ValueRef,
    VehicleActivity,
    VehicleLocation,
    VehicleMonitoringDelivery,
)
from pygrandlyon.models.vehicle import CacheSnapshot, FeedStatus, VehiclePosition

__all__ = [
    "CacheSnapshot",
    "FeedStatus",
    "MonitoredVehicleJourney",
    "ServiceDelivery",
    "Siri",
    "SiriBaseModel",
    "SiriResponse",
    "ValueRef",
    "VehicleActivity",
    "VehicleLocation",
    "VehicleMonitoringDelivery",
    "VehiclePosition",
]
