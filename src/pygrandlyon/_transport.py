"""HTTP transport for the Grand Lyon feeds."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pygrandlyon._constants import USER_AGENT
from pygrandlyon.exceptions import (
    UpstreamBadStatusError,
    UpstreamMalformedError,
    UpstreamUnreachableError,
)

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the caches.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, url: str, *, authenticated: bool = True) -> Any:
        ...


class HttpTransport:
    """aiohttp transport that GETs JSON documents, optionally with basic auth.

    Every failure is mapped onto the :class:`~pygrandlyon.exceptions.UpstreamError`
    family so callers only need to handle one hierarchy.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        username: str = "",
        password: str = "",
        timeout: float | None = None,
    ) -> None:
        self._http = http_session
        self._auth = aiohttp.BasicAuth(username, password) if username else None
        self._timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None

    async def get_json(self, url: str, *, authenticated: bool = True) -> Any:
        """GET *url* and return the decoded JSON body.

        Raises
        ------
        UpstreamUnreachableError
            Connection error or timeout.
        UpstreamBadStatusError
            Non-2xx status.
        UpstreamMalformedError
            Body is not valid UTF-8 JSON.
        """
        headers = {"accept": "application/json", "user-agent": USER_AGENT}
        kwargs: dict[str, Any] = {"headers": headers}
        if authenticated and self._auth is not None:
            kwargs["auth"] = self._auth
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        _logger.debug("GET %s authenticated=%s", url, authenticated and self._auth is not None)

        try:
            async with self._http.get(url, **kwargs) as resp:
                body = await resp.read()
                if not 200 <= resp.status < 300:
                    raise UpstreamBadStatusError(
                        f"HTTP {resp.status} from {url}: {body[:200]!r}",
                        status_code=resp.status,
                        url=url,
                    )
        except UpstreamBadStatusError:
            raise
        except TimeoutError as exc:
            raise UpstreamUnreachableError(f"Request to {url} timed out", url=url) from exc
        except aiohttp.ClientError as exc:
            raise UpstreamUnreachableError(f"Request to {url} failed: {exc}", url=url) from exc

        try:
            return json.loads(body.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise UpstreamMalformedError(
                f"Invalid JSON from {url}: {body[:200]!r}",
                url=url,
            ) from exc
