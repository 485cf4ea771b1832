"""High-level async client for the Grand Lyon transit feeds."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pygrandlyon._transport import HttpTransport, Transport
from pygrandlyon.cache import VehicleCache
from pygrandlyon.config import GrandLyonConfig
from pygrandlyon.exceptions import GrandLyonError
from pygrandlyon.layers import LayerCache
from pygrandlyon.models.vehicle import CacheSnapshot

_logger = logging.getLogger(__name__)

_NOT_STARTED = "Client not started. Use 'async with GrandLyonClient(...)' or call start()."


class GrandLyonClient:
    """Async facade over the vehicle cache and the static layer cache.

    Usage::

        async with GrandLyonClient(config) as client:
            snapshot = await client.get_vehicle_positions()
            metro = await client.get_layer("metro")

    A caller-provided ``aiohttp.ClientSession`` is used as-is and left open
    on exit. A ``transport`` may be injected instead of HTTP (tests).
    """

    def __init__(
        self,
        config: GrandLyonConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._vehicles: VehicleCache | None = None
        self._layers: LayerCache | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> GrandLyonClient:
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def start(self) -> None:
        if self._vehicles is not None:
            return
        transport = self._transport
        if transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = HttpTransport(
                self._http_session,
                username=self._config.username,
                password=self._config.password,
                timeout=self._config.request_timeout,
            )
            self._transport = transport
        self._vehicles = VehicleCache(transport, self._config.api_url, ttl=self._config.cache_ttl)
        self._layers = LayerCache(transport, self._config.layer_urls)
        _logger.debug("Client started for %s (layers=%s)", self._config.api_url, sorted(self._config.layer_urls))

    async def close(self) -> None:
        if self._http_session is not None and not self._external_session:
            await self._http_session.close()
            self._http_session = None
            self._transport = None
        self._vehicles = None
        self._layers = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> GrandLyonConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            raise GrandLyonError(_NOT_STARTED)
        return self._transport

    @property
    def vehicles(self) -> VehicleCache:
        if self._vehicles is None:
            raise GrandLyonError(_NOT_STARTED)
        return self._vehicles

    @property
    def layers(self) -> LayerCache:
        if self._layers is None:
            raise GrandLyonError(_NOT_STARTED)
        return self._layers

    async def get_vehicle_positions(self) -> CacheSnapshot:
        """Current deduplicated vehicle snapshot. Never raises on upstream failure."""
        return await self.vehicles.get_vehicle_positions()

    async def get_layer(self, name: str) -> dict[str, Any]:
        """GeoJSON document for a static layer, empty when unavailable."""
        return await self.layers.get(name)

    async def prefetch_layers(self) -> None:
        await self.layers.prefetch()
