"""Cache key derivation for result store entries."""

from __future__ import annotations

import hashlib

from scanvault.io import canonical_json
from scanvault.model import Identifier, ScannerDetails


def derive_cache_key(identifier: Identifier, details: ScannerDetails) -> str:
    """Return a stable key for an identifier scanned with a scanner configuration.

    Equal inputs give equal keys within and across processes; any difference
    in identifier fields or scanner name, version or configuration gives a
    different key.
    """
    payload = {
        "id": identifier.to_coordinates(),
        "scanner": details.to_dict(),
    }
    blob = canonical_json(payload).encode("utf-8")
    return hashlib.sha256(blob).hexdigest()
