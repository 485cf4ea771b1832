"""Static GeoJSON layer cache (metro/tram lines, stops).

Layers are fetched once and then held for the lifetime of the process.
A failed fetch serves an empty ``FeatureCollection`` and is retried on the
next request for that layer.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Mapping
from typing import Any

from pygrandlyon._constants import empty_feature_collection
from pygrandlyon._transport import Transport
from pygrandlyon.exceptions import UpstreamError, UpstreamMalformedError

_logger = logging.getLogger(__name__)


class LayerCache:
    """Fetch-on-miss, hold-forever cache of GeoJSON documents keyed by layer name."""

    def __init__(self, transport: Transport, layer_urls: Mapping[str, str]) -> None:
        self._transport = transport
        self._urls = dict(layer_urls)
        self._layers: dict[str, dict[str, Any]] = {}
        # One lock per layer: a slow fetch only holds back callers of that layer.
        self._locks: dict[str, asyncio.Lock] = {name: asyncio.Lock() for name in self._urls}

    @property
    def names(self) -> list[str]:
        return sorted(self._urls)

    def is_cached(self, name: str) -> bool:
        return name in self._layers

    async def prefetch(self) -> None:
        """Fetch every configured layer that is not cached yet."""
        for name in self.names:
            await self.get(name)

    async def get(self, name: str) -> dict[str, Any]:
        """Return a copy of the layer's GeoJSON document.

        Unknown layers and upstream failures yield an empty
        ``FeatureCollection``.
        """
        url = self._urls.get(name)
        if url is None:
            _logger.debug("Unknown layer requested: %s", name)
            return empty_feature_collection()

        layer = self._layers.get(name)
        if layer is not None:
            return copy.deepcopy(layer)

        async with self._locks[name]:
            layer = self._layers.get(name)
            if layer is None:
                layer = await self._fetch(name, url)
                if layer is None:
                    return empty_feature_collection()
                self._layers[name] = layer
        return copy.deepcopy(layer)

    async def _fetch(self, name: str, url: str) -> dict[str, Any] | None:
        _logger.info("Fetching %s layer from %s", name, url)
        try:
            data = await self._transport.get_json(url, authenticated=False)
            if not isinstance(data, dict):
                raise UpstreamMalformedError(f"{name} layer is {type(data).__name__}, expected object", url=url)
        except UpstreamError as exc:
            _logger.warning("Failed to fetch %s layer: %s", name, exc)
            return None
        features = data.get("features")
        _logger.info("%s layer cached (%d features)", name, len(features) if isinstance(features, list) else 0)
        return data
