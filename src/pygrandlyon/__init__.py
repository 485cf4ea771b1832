"""pygrandlyon - Async read-through cache for the Grand Lyon real-time transit feed."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pygrandlyon")
except PackageNotFoundError:
    __version__ = "0+local"
from pygrandlyon.cache import VehicleCache
from pygrandlyon.client import GrandLyonClient
from pygrandlyon.config import GrandLyonConfig
from pygrandlyon.exceptions import (
    FieldUnparseableError,
    GrandLyonConfigError,
    GrandLyonError,
    UpstreamBadStatusError,
    UpstreamError,
    UpstreamMalformedError,
    UpstreamUnreachableError,
)
from pygrandlyon.layers import LayerCache
from pygrandlyon.models import CacheSnapshot, FeedStatus, VehiclePosition

__all__ = [
    "__version__",
    "CacheSnapshot",
    "FeedStatus",
    "FieldUnparseableError",
    "GrandLyonClient",
    "GrandLyonConfig",
    "GrandLyonConfigError",
    "GrandLyonError",
    "LayerCache",
    "UpstreamBadStatusError",
    "UpstreamError",
    "UpstreamMalformedError",
    "UpstreamUnreachableError",
    "VehicleCache",
    "VehiclePosition",
]
