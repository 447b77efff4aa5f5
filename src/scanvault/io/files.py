"""File-level helpers for hashing."""

from __future__ import annotations

import hashlib
from pathlib import Path

from scanvault.constants.cache import FILE_HASH_CHUNK_SIZE


def file_digest(path: Path, algorithm: str) -> str:
    """Return the hex digest of a file for any ``hashlib`` algorithm name."""
    digest = hashlib.new(algorithm)
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(FILE_HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
