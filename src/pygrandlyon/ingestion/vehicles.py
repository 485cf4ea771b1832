"""Vehicle feed ingestion: flatten, map and deduplicate SIRI activities."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from pygrandlyon._redact import redact_for_log
from pygrandlyon.exceptions import UpstreamMalformedError
from pygrandlyon.models.siri import SiriResponse, VehicleActivity, VehicleMonitoringDelivery
from pygrandlyon.models.vehicle import FeedStatus, VehiclePosition

_logger = logging.getLogger(__name__)

# Sorts after any real delay magnitude.
_NO_DELAY = float("inf")


@dataclass(frozen=True, slots=True)
class FeedResult:
    """Outcome of reconciling one feed document."""

    status: FeedStatus
    vehicles: tuple[VehiclePosition, ...] = ()
    response_timestamp: datetime | None = None
    dropped: int = field(default=0, compare=False)


def parse_feed(payload: Any, *, url: str = "") -> SiriResponse:
    """Validate the top level of a feed document.

    Raises
    ------
    UpstreamMalformedError
        If the document is not an object or its ``Siri``/``ServiceDelivery``
        containers have the wrong shape.
    """
    if not isinstance(payload, dict):
        raise UpstreamMalformedError(f"Feed document is {type(payload).__name__}, expected object", url=url)
    try:
        return SiriResponse.model_validate(payload)
    except ValidationError as exc:
        raise UpstreamMalformedError(f"Feed document does not match the SIRI schema: {exc}", url=url) from exc


def map_activities(deliveries: Iterable[VehicleMonitoringDelivery]) -> tuple[list[VehiclePosition], int]:
    """Flatten every activity of every delivery into positions.

    Returns the positions and the number of activities dropped because their
    vehicle reference could not be extracted.
    """
    positions: list[VehiclePosition] = []
    dropped = 0
    for delivery in deliveries:
        for raw in delivery.vehicle_activity:
            try:
                activity = VehicleActivity.model_validate(raw)
            except ValidationError:
                dropped += 1
                _logger.debug("Dropping unextractable vehicle activity: %s", redact_for_log(raw))
                continue
            positions.append(VehiclePosition.from_activity(activity))
    return positions, dropped


def candidate_rank(position: VehiclePosition) -> tuple[int, float]:
    """Sort key for duplicate candidates, lower is preferred.

    Real-time records carry a small parseable delay; the phantom
    "scheduled" duplicates carry none or a large one.
    """
    seconds = position.delay_seconds
    if seconds is None:
        return (1, _NO_DELAY)
    return (0, seconds)


def select_best(candidates: Sequence[VehiclePosition]) -> VehiclePosition:
    """Pick the preferred record among duplicates; ties go to the first seen."""
    if not candidates:
        raise ValueError("select_best() requires at least one candidate")
    # min() keeps the first of equal keys.
    return min(candidates, key=candidate_rank)


def deduplicate(positions: Iterable[VehiclePosition]) -> list[VehiclePosition]:
    """Collapse records sharing a vehicle id into one.

    Records without a vehicle id are kept one each. Output follows the
    order in which each vehicle (or anonymous record) first appeared.
    """
    slots: list[list[VehiclePosition]] = []
    index: dict[str, int] = {}
    for position in positions:
        vehicle_id = position.vehicle_id
        if vehicle_id is None:
            slots.append([position])
            continue
        slot = index.get(vehicle_id)
        if slot is None:
            index[vehicle_id] = len(slots)
            slots.append([position])
        else:
            slots[slot].append(position)

    result: list[VehiclePosition] = []
    for candidates in slots:
        if len(candidates) > 1:
            _logger.debug(
                "Vehicle %s reported %d times, delays=%s",
                candidates[0].vehicle_id,
                len(candidates),
                [c.delay for c in candidates],
            )
        result.append(select_best(candidates))
    return result


def reconcile_feed(payload: Any, *, url: str = "") -> FeedResult:
    """Turn a raw feed document into a deduplicated :class:`FeedResult`.

    A missing delivery container yields an empty ``NO_DATA`` result.

    Raises
    ------
    UpstreamMalformedError
        If the top-level structure is malformed (see :func:`parse_feed`).
    """
    response = parse_feed(payload, url=url)
    timestamp = response.response_timestamp
    deliveries = response.deliveries
    if deliveries is None:
        return FeedResult(status=FeedStatus.NO_DATA, response_timestamp=timestamp)

    positions, dropped = map_activities(deliveries)
    vehicles = deduplicate(positions)
    return FeedResult(
        status=FeedStatus.OK,
        vehicles=tuple(vehicles),
        response_timestamp=timestamp,
        dropped=dropped,
    )
