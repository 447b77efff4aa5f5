"""Shared type aliases for scanvault."""

from .common import IssueSeverity, JsonObject, JsonScalar, JsonValue
from .store import ScannerDetailsPayload, StoreDocument

__all__ = [
    "IssueSeverity",
    "JsonObject",
    "JsonScalar",
    "JsonValue",
    "ScannerDetailsPayload",
    "StoreDocument",
]
