"""Ingestion layer.

Turns raw upstream feed documents into normalized, deduplicated domain
objects. Nothing in here performs I/O.
"""

__all__: list[str] = []
