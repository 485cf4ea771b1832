"""Time-boxed, single-flight cache of reconciled vehicle positions."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime

from pygrandlyon._constants import CACHE_TTL_SECONDS
from pygrandlyon._transport import Transport
from pygrandlyon.exceptions import UpstreamError
from pygrandlyon.ingestion.vehicles import FeedResult, reconcile_feed
from pygrandlyon.models.vehicle import CacheSnapshot, FeedStatus

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class VehicleCache:
    """Read-through cache in front of the SIRI vehicle feed.

    The first call always fetches. Later calls are served from the published
    snapshot until *ttl* seconds have passed since the last refresh attempt,
    after which exactly one caller refreshes while the others wait on the
    lock and then receive the same fresh snapshot.

    Upstream failures never propagate: they publish an empty snapshot with
    :attr:`FeedStatus.ERROR` rather than keeping stale vehicles around.

    Usage::

        cache = VehicleCache(transport, config.api_url)
        snapshot = await cache.get_vehicle_positions()
    """

    def __init__(
        self,
        transport: Transport,
        url: str,
        *,
        ttl: float = CACHE_TTL_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._url = url
        self._ttl = ttl
        self._monotonic = monotonic
        self._clock = clock
        self._lock = asyncio.Lock()
        self._snapshot = CacheSnapshot()
        self._last_fetch: float | None = None

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def snapshot(self) -> CacheSnapshot:
        """Currently published snapshot. Never triggers a refresh."""
        return self._snapshot

    def is_fresh(self) -> bool:
        if self._last_fetch is None:
            return False
        return self._monotonic() - self._last_fetch < self._ttl

    def invalidate(self) -> None:
        """Force the next :meth:`get_vehicle_positions` call to refresh."""
        self._last_fetch = None

    async def get_vehicle_positions(self) -> CacheSnapshot:
        """Return the current snapshot, refreshing it first if it is stale."""
        async with self._lock:
            if not self.is_fresh():
                await self._refresh()
            return self._snapshot

    async def _refresh(self) -> None:
        started = self._monotonic()
        result = await self._fetch()
        # Replace wholesale; readers outside the lock only ever see whole snapshots.
        self._snapshot = CacheSnapshot(
            vehicles=result.vehicles,
            api_response_timestamp=result.response_timestamp,
            last_fetch_time=self._clock(),
            api_status=result.status,
        )
        self._last_fetch = self._monotonic()
        _logger.info(
            "Vehicle feed refreshed: status=%s vehicles=%d dropped=%d in %.0f ms",
            result.status,
            len(result.vehicles),
            result.dropped,
            (self._last_fetch - started) * 1000,
        )

    async def _fetch(self) -> FeedResult:
        try:
            payload = await self._transport.get_json(self._url)
            result = reconcile_feed(payload, url=self._url)
        except UpstreamError as exc:
            _logger.warning("Vehicle feed unavailable, publishing empty snapshot: %s", exc)
            return FeedResult(status=FeedStatus.ERROR)
        except Exception:
            _logger.exception("Unexpected failure while refreshing vehicle feed, publishing empty snapshot")
            return FeedResult(status=FeedStatus.ERROR)

        if result.status is FeedStatus.NO_DATA:
            _logger.warning("Vehicle feed has no VehicleMonitoringDelivery, publishing empty snapshot")
        if result.response_timestamp is None:
            _logger.debug("Vehicle feed ResponseTimestamp missing or unparseable")
        return result
