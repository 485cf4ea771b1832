"""Custom exception hierarchy for pygrandlyon."""

from __future__ import annotations


class GrandLyonError(Exception):
    """Base exception for all pygrandlyon errors."""


class GrandLyonConfigError(GrandLyonError):
    """Invalid or missing configuration."""


class UpstreamError(GrandLyonError):
    """Fetching or decoding an upstream resource failed."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class UpstreamUnreachableError(UpstreamError):
    """Connection failure or client-side timeout."""


class UpstreamBadStatusError(UpstreamError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int, url: str = "") -> None:
        self.status_code = status_code
        super().__init__(message, url=url)


class UpstreamMalformedError(UpstreamError):
    """Body is not JSON or does not match the expected top-level schema."""


class FieldUnparseableError(GrandLyonError, ValueError):
    """A nested timestamp or duration could not be parsed.

    Always absorbed per field: the affected value becomes ``None`` and the
    rest of the record is kept.
    """

    def __init__(self, message: str, *, value: object = None) -> None:
        self.value = value
        super().__init__(message)
