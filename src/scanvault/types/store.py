"""Typed payload structures persisted by result stores."""

from __future__ import annotations

from typing import TypedDict

from scanvault.types.common import JsonObject


class ScannerDetailsPayload(TypedDict):
    """Serialized scanner identity."""

    name: str
    version: str
    configuration: str


class StoreDocument(TypedDict):
    """One stored entry: every result recorded under a single cache key."""

    version: int
    key: str
    id: str
    scanner: ScannerDetailsPayload
    results: list[JsonObject]
