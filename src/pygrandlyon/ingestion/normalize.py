"""Normalization helpers.

Centralizes defensive parsing of upstream scalars. The ``*_strict`` parsers
raise :class:`~pygrandlyon.exceptions.FieldUnparseableError`; the lenient
variants absorb it and return ``None`` so one bad field never discards a
record.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import TypeAdapter, ValidationError

from pygrandlyon.exceptions import FieldUnparseableError

_DATETIME_ADAPTER: TypeAdapter[datetime] = TypeAdapter(datetime)
_DURATION_ADAPTER: TypeAdapter[timedelta] = TypeAdapter(timedelta)


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    """Return *value* as a non-empty string, or ``None``.

    Numbers are stringified (some feeds send numeric refs); containers are
    not, since a dict or list is never a meaningful scalar.
    """
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text if text else None


def parse_instant_strict(value: Any) -> datetime:
    """Parse an ISO-8601 date-time into a timezone-aware datetime.

    Values without an offset are taken as UTC.
    """
    if not isinstance(value, str) or "T" not in value.upper():
        raise FieldUnparseableError(f"not an ISO-8601 date-time: {value!r}", value=value)
    try:
        parsed = _DATETIME_ADAPTER.validate_python(value.strip())
    except ValidationError as exc:
        raise FieldUnparseableError(f"not an ISO-8601 date-time: {value!r}", value=value) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def parse_instant(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        return parse_instant_strict(value)
    except FieldUnparseableError:
        return None


def parse_duration_strict(value: Any) -> timedelta:
    """Parse an ISO-8601 duration such as ``"PT30S"`` or ``"-PT1M5S"``."""
    if not isinstance(value, str):
        raise FieldUnparseableError(f"not an ISO-8601 duration: {value!r}", value=value)
    text = value.strip().upper()
    if not text.lstrip("+-").startswith("P"):
        raise FieldUnparseableError(f"not an ISO-8601 duration: {value!r}", value=value)
    try:
        return _DURATION_ADAPTER.validate_python(text)
    except ValidationError as exc:
        raise FieldUnparseableError(f"not an ISO-8601 duration: {value!r}", value=value) from exc


def duration_magnitude_seconds(value: Any) -> float | None:
    """Absolute size of an ISO-8601 duration in seconds, ``None`` if unparseable."""
    if value is None:
        return None
    try:
        return abs(parse_duration_strict(value).total_seconds())
    except FieldUnparseableError:
        return None
