"""Encoding and decoding of stored result documents."""

from __future__ import annotations

from scanvault.constants.cache import STORE_VERSION
from scanvault.exceptions import StoreError
from scanvault.model import Identifier, ScanResult
from scanvault.types import StoreDocument


def encode_document(
    identifier: Identifier,
    key: str,
    existing: tuple[ScanResult, ...],
    result: ScanResult,
) -> StoreDocument:
    """Build the document for *key* with *result* appended to *existing* ones."""
    results = [stored.to_dict() for stored in existing]
    results.append(result.to_dict())
    return {
        "version": STORE_VERSION,
        "key": key,
        "id": identifier.to_coordinates(),
        "scanner": {
            "name": result.scanner.name,
            "version": result.scanner.version,
            "configuration": result.scanner.configuration,
        },
        "results": results,
    }


def decode_document(raw: object, key: str) -> tuple[ScanResult, ...]:
    """Return the results held by a stored document, raising StoreError if malformed."""
    if not isinstance(raw, dict):
        raise StoreError(f"stored entry {key} is not a JSON object")
    if raw.get("version") != STORE_VERSION:
        raise StoreError(f"stored entry {key} has unsupported version {raw.get('version')!r}")
    if raw.get("key") != key:
        raise StoreError(f"stored entry {key} was recorded under a different key")

    results = raw.get("results")
    if not isinstance(results, list):
        raise StoreError(f"stored entry {key} has no results list")

    try:
        return tuple(ScanResult.from_dict(item) for item in results)
    except (TypeError, ValueError) as exc:
        raise StoreError(f"stored entry {key} holds a malformed result: {exc}") from exc
