"""Config data model for scanvault runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from scanvault.constants.cache import DEFAULT_HTTP_STORAGE_TIMEOUT
from scanvault.constants.config import (
    DEFAULT_BOOTSTRAP_DIR,
    DEFAULT_DOWNLOAD_DIR,
    DEFAULT_MAX_WORKERS,
    DEFAULT_SCANNER_NAME,
    DEFAULT_STORAGE_BACKEND,
    DEFAULT_STORAGE_DIR,
)
from scanvault.types import JsonValue


@dataclass(frozen=True)
class ScannerConfig:
    """Scanner engine selection and its result-affecting options."""

    name: str = DEFAULT_SCANNER_NAME
    version: str | None = None
    version_requirement: str | None = None
    options: dict[str, JsonValue] | None = None
    processes: int | None = None


@dataclass(frozen=True)
class StorageConfig:
    """Result store backend settings."""

    backend: str = DEFAULT_STORAGE_BACKEND
    directory: Path = Path(DEFAULT_STORAGE_DIR)
    url: str = ""
    timeout: int = DEFAULT_HTTP_STORAGE_TIMEOUT
    headers: dict[str, str] | None = None


@dataclass(frozen=True)
class ScanvaultConfig:
    """Resolved scanvault config."""

    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    download_dir: Path = Path(DEFAULT_DOWNLOAD_DIR)
    bootstrap_dir: Path = Path(DEFAULT_BOOTSTRAP_DIR)
    keep_downloads: bool = False
    max_workers: int = DEFAULT_MAX_WORKERS
