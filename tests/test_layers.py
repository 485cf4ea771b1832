from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from pygrandlyon.exceptions import UpstreamUnreachableError
from pygrandlyon.layers import LayerCache

METRO_URL = "https://data.example.test/metro.geojson"
TRAM_URL = "https://data.example.test/tram.geojson"
EMPTY = {"type": "FeatureCollection", "features": []}


def _collection(name: str) -> dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [{"type": "Feature", "properties": {"ligne": name}, "geometry": None}],
    }


@dataclass
class FakeLayerSource:
    documents: dict[str, Any]
    failures: dict[str, int] = field(default_factory=dict)
    calls: list[tuple[str, bool]] = field(default_factory=list)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)

    async def get_json(self, url: str, *, authenticated: bool = True) -> Any:
        self.calls.append((url, authenticated))
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()
        remaining = self.failures.get(url, 0)
        if remaining:
            self.failures[url] = remaining - 1
            raise UpstreamUnreachableError("connection reset", url=url)
        return self.documents[url]


@pytest.mark.asyncio
async def test_prefetch_fetches_each_layer_once_without_auth() -> None:
    source = FakeLayerSource({METRO_URL: _collection("A"), TRAM_URL: _collection("T1")})
    layers = LayerCache(source, {"metro": METRO_URL, "tram": TRAM_URL})

    await layers.prefetch()
    metro = await layers.get("metro")
    await layers.get("tram")

    assert metro == _collection("A")
    assert sorted(source.calls) == [(METRO_URL, False), (TRAM_URL, False)]
    assert layers.is_cached("metro")
    assert layers.names == ["metro", "tram"]


@pytest.mark.asyncio
async def test_get_fetches_on_miss() -> None:
    source = FakeLayerSource({TRAM_URL: _collection("T2")})
    layers = LayerCache(source, {"tram": TRAM_URL})

    assert not layers.is_cached("tram")
    assert await layers.get("tram") == _collection("T2")
    assert len(source.calls) == 1


@pytest.mark.asyncio
async def test_failure_serves_empty_collection_and_retries_later() -> None:
    source = FakeLayerSource({METRO_URL: _collection("B")}, failures={METRO_URL: 1})
    layers = LayerCache(source, {"metro": METRO_URL})

    assert await layers.get("metro") == EMPTY
    assert not layers.is_cached("metro")
    assert await layers.get("metro") == _collection("B")
    assert len(source.calls) == 2


@pytest.mark.asyncio
async def test_non_object_document_is_treated_as_failure() -> None:
    source = FakeLayerSource({METRO_URL: ["not", "geojson"]})
    layers = LayerCache(source, {"metro": METRO_URL})

    assert await layers.get("metro") == EMPTY
    assert not layers.is_cached("metro")


@pytest.mark.asyncio
async def test_unknown_layer_is_empty() -> None:
    source = FakeLayerSource({})
    layers = LayerCache(source, {})

    assert await layers.get("funicular") == EMPTY
    assert source.calls == []


@pytest.mark.asyncio
async def test_callers_cannot_mutate_cached_layer() -> None:
    source = FakeLayerSource({METRO_URL: _collection("C")})
    layers = LayerCache(source, {"metro": METRO_URL})

    first = await layers.get("metro")
    first["features"].clear()

    assert await layers.get("metro") == _collection("C")


@pytest.mark.asyncio
async def test_cached_layer_is_served_while_another_layer_is_fetching() -> None:
    gate = asyncio.Event()
    source = FakeLayerSource(
        {METRO_URL: _collection("A"), TRAM_URL: _collection("T1")},
        failures={TRAM_URL: 1},
        gates={TRAM_URL: gate},
    )
    layers = LayerCache(source, {"metro": METRO_URL, "tram": TRAM_URL})
    await layers.get("metro")

    tram = asyncio.create_task(layers.get("tram"))
    await asyncio.sleep(0)
    assert not tram.done()

    metro = await asyncio.wait_for(layers.get("metro"), timeout=1.0)

    assert metro == _collection("A")
    assert not tram.done()
    gate.set()
    assert await tram == EMPTY
    assert source.calls.count((METRO_URL, False)) == 1


@pytest.mark.asyncio
async def test_concurrent_misses_for_one_layer_share_a_fetch() -> None:
    gate = asyncio.Event()
    source = FakeLayerSource({TRAM_URL: _collection("T3")}, gates={TRAM_URL: gate})
    layers = LayerCache(source, {"tram": TRAM_URL})

    pending = [asyncio.create_task(layers.get("tram")) for _ in range(5)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*pending)

    assert results == [_collection("T3")] * 5
    assert len(source.calls) == 1
