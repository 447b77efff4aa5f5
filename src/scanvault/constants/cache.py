"""Constants used by result stores and hashing."""

from __future__ import annotations

STORE_VERSION: int = 1
STORE_ENTRY_SUFFIX: str = ".json"
STORE_TEMP_PREFIX: str = ".entry-"
STORE_TEMP_SUFFIX: str = ".tmp"
FILE_HASH_CHUNK_SIZE: int = 65536

STORAGE_BACKEND_LOCAL: str = "local"
STORAGE_BACKEND_HTTP: str = "http"
STORAGE_BACKEND_NONE: str = "none"
VALID_STORAGE_BACKENDS: frozenset[str] = frozenset(
    {STORAGE_BACKEND_LOCAL, STORAGE_BACKEND_HTTP, STORAGE_BACKEND_NONE}
)

DEFAULT_HTTP_STORAGE_TIMEOUT: int = 30
