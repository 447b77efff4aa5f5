"""Result stores for scan results keyed by identifier and scanner details."""

from __future__ import annotations

from scanvault.config.model import StorageConfig
from scanvault.constants.cache import STORAGE_BACKEND_HTTP, STORAGE_BACKEND_LOCAL, STORAGE_BACKEND_NONE
from scanvault.exceptions import ConfigError

from .base import ScanResultStorage
from .http import HttpStorage
from .keys import derive_cache_key
from .local import LocalFileStorage
from .null import NullStorage

__all__ = [
    "HttpStorage",
    "LocalFileStorage",
    "NullStorage",
    "ScanResultStorage",
    "create_storage",
    "derive_cache_key",
]


def create_storage(config: StorageConfig) -> ScanResultStorage:
    """Build the result store selected by ``storage.backend``."""
    if config.backend == STORAGE_BACKEND_LOCAL:
        return LocalFileStorage(config.directory)
    if config.backend == STORAGE_BACKEND_HTTP:
        return HttpStorage(config.url, timeout=config.timeout, headers=config.headers)
    if config.backend == STORAGE_BACKEND_NONE:
        return NullStorage()
    raise ConfigError(f"Unknown storage backend: {config.backend!r}")
