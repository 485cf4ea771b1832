"""Internal constants shared across the library."""

from typing import Any

USER_AGENT = "pygrandlyon/1.0"

#: Seconds a vehicle snapshot is served without contacting the feed.
CACHE_TTL_SECONDS: float = 3.0

DEFAULT_REQUEST_TIMEOUT: float = 10.0

#: Layer served on ``/api/metro-lines``.
METRO_LAYER = "metro"


def empty_feature_collection() -> dict[str, Any]:
    """Return a fresh empty GeoJSON ``FeatureCollection``."""
    return {"type": "FeatureCollection", "features": []}
