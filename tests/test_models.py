from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pygrandlyon.models.siri import MonitoredVehicleJourney, SiriResponse, ValueRef, VehicleActivity
from pygrandlyon.models.vehicle import CacheSnapshot, FeedStatus, VehiclePosition


def _full_activity() -> dict[str, object]:
    return {
        "RecordedAtTime": "2025-03-01T08:15:30Z",
        "ValidUntilTime": "2025-03-01T08:20:30Z",
        "MonitoredVehicleJourney": {
            "LineRef": {"value": "ActIV:Line::C3:SYTRAL"},
            "DirectionRef": {"value": "outbound"},
            "VehicleLocation": {"Longitude": 4.8357, "Latitude": 45.75},
            "VehicleRef": {"value": "TCL:Vehicle::2105:LOC"},
            "DestinationRef": {"value": "ActIV:StopPoint:Laurent Bonnevay"},
            "DataSource": "SYTRAL",
            "Bearing": 182.5,
            "VehicleStatus": "inProgress",
            "Delay": "PT45S",
        },
    }


def test_vehicle_position_preserves_every_field() -> None:
    position = VehiclePosition.from_activity(VehicleActivity.model_validate(_full_activity()))

    assert position.vehicle_id == "TCL:Vehicle::2105:LOC"
    assert position.line_id == "ActIV:Line::C3:SYTRAL"
    assert position.direction == "outbound"
    assert position.latitude == 45.75
    assert position.longitude == 4.8357
    assert position.delay == "PT45S"
    assert position.delay_seconds == 45.0
    assert position.recorded_at_time == datetime(2025, 3, 1, 8, 15, 30, tzinfo=UTC)
    assert position.valid_until_time == datetime(2025, 3, 1, 8, 20, 30, tzinfo=UTC)
    assert position.destination_name == "ActIV:StopPoint:Laurent Bonnevay"
    assert position.data_source == "SYTRAL"
    assert position.bearing == 182.5
    assert position.vehicle_status == "inProgress"


def test_missing_nested_refs_degrade_to_defaults() -> None:
    activity = VehicleActivity.model_validate(
        {
            "RecordedAtTime": "sometime",
            "MonitoredVehicleJourney": {
                "VehicleRef": {"value": "42"},
                "LineRef": "not-an-object-but-a-scalar",
                "DirectionRef": ["bad"],
                "VehicleLocation": "nowhere",
                "Bearing": "north",
            },
        }
    )
    position = VehiclePosition.from_activity(activity)

    assert position.vehicle_id == "42"
    assert position.line_id == "not-an-object-but-a-scalar"
    assert position.direction is None
    assert position.latitude == 0.0
    assert position.longitude == 0.0
    assert position.bearing is None
    assert position.recorded_at_time is None
    assert position.delay is None


def test_absent_vehicle_ref_is_not_an_error() -> None:
    journey = MonitoredVehicleJourney.model_validate({"LineRef": {"value": "T1"}})
    assert journey.vehicle_id is None

    blank = MonitoredVehicleJourney.model_validate({"VehicleRef": {"value": ""}})
    assert blank.vehicle_id is None


@pytest.mark.parametrize("vehicle_ref", [["2105"], {"value": {"id": "2105"}}, {"value": ["2105"]}, True])
def test_malformed_vehicle_ref_fails_the_activity(vehicle_ref: object) -> None:
    with pytest.raises(ValidationError):
        VehicleActivity.model_validate({"MonitoredVehicleJourney": {"VehicleRef": vehicle_ref}})


def test_activity_without_journey_fails() -> None:
    with pytest.raises(ValidationError):
        VehicleActivity.model_validate({"RecordedAtTime": "2025-03-01T08:15:30Z"})


def test_value_ref_accepts_numeric_value() -> None:
    assert ValueRef.model_validate({"value": 2105}).value == "2105"


def test_partial_location_defaults_missing_coordinate() -> None:
    activity = VehicleActivity.model_validate(
        {"MonitoredVehicleJourney": {"VehicleLocation": {"Latitude": "45.76"}}}
    )
    position = VehiclePosition.from_activity(activity)
    assert position.latitude == 45.76
    assert position.longitude == 0.0


def test_siri_response_accessors_short_circuit() -> None:
    assert SiriResponse.model_validate({}).deliveries is None
    assert SiriResponse.model_validate({"Siri": {}}).deliveries is None
    assert SiriResponse.model_validate({"Siri": {"ServiceDelivery": {}}}).response_timestamp is None

    response = SiriResponse.model_validate(
        {
            "Siri": {
                "ServiceDelivery": {
                    "ResponseTimestamp": "2025-03-01T08:15:31Z",
                    "VehicleMonitoringDelivery": [{"VehicleActivity": [_full_activity()]}, "junk"],
                }
            }
        }
    )
    assert response.response_timestamp == datetime(2025, 3, 1, 8, 15, 31, tzinfo=UTC)
    assert response.deliveries is not None
    assert len(response.deliveries) == 1
    assert len(response.deliveries[0].vehicle_activity) == 1


@pytest.mark.parametrize(
    ("status", "wire"),
    [
        (FeedStatus.PENDING, "PENDING"),
        (FeedStatus.OK, "OK"),
        (FeedStatus.NO_DATA, "NO_DATA"),
        (FeedStatus.ERROR, "API_DOWN"),
    ],
)
def test_api_status_wire_values_match_frontend(status: FeedStatus, wire: str) -> None:
    assert CacheSnapshot(api_status=status).to_payload()["apiStatus"] == wire


def test_snapshot_payload_uses_camel_case() -> None:
    position = VehiclePosition.from_activity(VehicleActivity.model_validate(_full_activity()))
    snapshot = CacheSnapshot(
        vehicles=(position,),
        api_response_timestamp=datetime(2025, 3, 1, 8, 15, 31, tzinfo=UTC),
        last_fetch_time=datetime(2025, 3, 1, 8, 15, 32, tzinfo=UTC),
        api_status=FeedStatus.OK,
    )

    payload = snapshot.to_payload()

    assert payload["apiStatus"] == "OK"
    assert payload["apiResponseTimestamp"].startswith("2025-03-01T08:15:31")
    assert payload["lastFetchTime"].startswith("2025-03-01T08:15:32")
    vehicle = payload["vehicles"][0]
    assert vehicle["vehicleId"] == "TCL:Vehicle::2105:LOC"
    assert vehicle["destinationName"] == "ActIV:StopPoint:Laurent Bonnevay"
    assert vehicle["recordedAtTime"].startswith("2025-03-01T08:15:30")
    assert vehicle["latitude"] == 45.75


def test_snapshot_is_immutable() -> None:
    snapshot = CacheSnapshot()
    assert snapshot.api_status == FeedStatus.PENDING
    with pytest.raises(ValidationError):
        snapshot.api_status = FeedStatus.OK  # type: ignore[misc]
