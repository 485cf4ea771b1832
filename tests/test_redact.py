from __future__ import annotations

from pygrandlyon._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "MonitoredVehicleJourney": {"VehicleRef": {"value": "2105"}},
        "Authorization": "Basic bHlvbjpzM2NyZXQ=",
        "password": "pw",
        "nested": {"username": "lyon"},
    }

    redacted = redact_for_log(payload)
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["password"] == "<redacted>"
    assert redacted["nested"]["username"] == "<redacted>"
    assert redacted["MonitoredVehicleJourney"] == {"VehicleRef": {"value": "2105"}}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_bounds_long_lists() -> None:
    redacted = redact_for_log(list(range(50)), max_items=5)
    assert redacted == [0, 1, 2, 3, 4, "<45 more>"]
