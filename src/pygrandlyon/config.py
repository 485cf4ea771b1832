"""Client configuration for pygrandlyon."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pygrandlyon._constants import CACHE_TTL_SECONDS, DEFAULT_REQUEST_TIMEOUT
from pygrandlyon.exceptions import GrandLyonConfigError

_LAYER_ENV_PREFIX = "GRANDLYON_LAYER_"


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise GrandLyonConfigError(f"{key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class GrandLyonConfig:
    """Service configuration.

    Resolved once at startup and never mutated afterwards.

    Parameters
    ----------
    api_url : str
        Full URL of the SIRI VehicleMonitoring JSON feed.
    username : str
        Basic-auth user for the feed.
    password : str
        Basic-auth password for the feed.
    layer_urls : dict[str, str]
        Static GeoJSON layers keyed by layer name (``"metro"``, ``"tram"``...).
    cache_ttl : float
        Seconds a vehicle snapshot is served before the next call refreshes it.
    request_timeout : float
        Total client-side timeout for one upstream request, in seconds.
    """

    api_url: str
    username: str = ""
    password: str = dataclasses.field(default="", repr=False)
    layer_urls: dict[str, str] = dataclasses.field(default_factory=dict)
    cache_ttl: float = CACHE_TTL_SECONDS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if not self.api_url or not self.api_url.strip():
            raise GrandLyonConfigError("api_url must be set")
        if self.cache_ttl <= 0:
            raise GrandLyonConfigError(f"cache_ttl must be positive, got {self.cache_ttl}")
        if self.request_timeout <= 0:
            raise GrandLyonConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    @classmethod
    def from_env(cls, **overrides: Any) -> GrandLyonConfig:
        """Create configuration from environment variables.

        Reads ``GRANDLYON_API_URL``, ``GRANDLYON_USERNAME``,
        ``GRANDLYON_PASSWORD``, ``GRANDLYON_CACHE_TTL``,
        ``GRANDLYON_REQUEST_TIMEOUT`` and one ``GRANDLYON_LAYER_<NAME>``
        variable per static layer. Explicit keyword arguments override
        environment values.

        Raises
        ------
        GrandLyonConfigError
            If the feed URL is missing or a numeric value is invalid.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "GRANDLYON_API_URL": "api_url",
            "GRANDLYON_USERNAME": "username",
            "GRANDLYON_PASSWORD": "password",
        }
        config_kwargs: dict[str, Any] = {"api_url": ""}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        layer_urls: dict[str, str] = {}
        for env_key, val in env.items():
            if env_key.startswith(_LAYER_ENV_PREFIX) and val:
                layer_urls[env_key[len(_LAYER_ENV_PREFIX) :].lower()] = val
        config_kwargs["layer_urls"] = layer_urls

        ttl = _env_float(env, "GRANDLYON_CACHE_TTL")
        if ttl is not None and "cache_ttl" not in overrides:
            config_kwargs["cache_ttl"] = ttl

        timeout = _env_float(env, "GRANDLYON_REQUEST_TIMEOUT")
        if timeout is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = timeout

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
