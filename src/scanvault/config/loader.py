"""Config loading and normalization for scanvault runs."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from packaging.specifiers import InvalidSpecifier, SpecifierSet

from scanvault.config.model import ScannerConfig, ScanvaultConfig, StorageConfig
from scanvault.constants.cache import (
    DEFAULT_HTTP_STORAGE_TIMEOUT,
    STORAGE_BACKEND_HTTP,
    VALID_STORAGE_BACKENDS,
)
from scanvault.constants.config import (
    CONFIG_FILENAME,
    DEFAULT_BOOTSTRAP_DIR,
    DEFAULT_DOWNLOAD_DIR,
    DEFAULT_MAX_WORKERS,
    DEFAULT_SCANNER_NAME,
    DEFAULT_STORAGE_BACKEND,
    DEFAULT_STORAGE_DIR,
)
from scanvault.constants.scanners import VALID_SCANNERS
from scanvault.exceptions import ConfigError


def load_config(root: Path, config_path: Path | None = None) -> ScanvaultConfig:
    """Load and validate config from ``scanvault.yaml`` or an explicit path.

    Relative directories are resolved against *root*.
    """
    root = root.resolve()
    path = config_path.resolve() if config_path else (root / CONFIG_FILENAME)
    if not path.exists():
        if config_path is not None:
            raise ConfigError(f"Config file not found: {path}")
        return _default_config(root)

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML config file at {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file at {path} must be a YAML mapping")

    scanner_raw = _ensure_mapping(raw.get("scanner"), "scanner")
    storage_raw = _ensure_mapping(raw.get("storage"), "storage")

    keep_downloads = raw.get("keep_downloads", False)
    if not isinstance(keep_downloads, bool):
        raise ConfigError("keep_downloads must be a boolean")

    return ScanvaultConfig(
        scanner=_build_scanner_config(scanner_raw),
        storage=_build_storage_config(storage_raw, root),
        download_dir=_resolve_dir(root, raw.get("download_dir", DEFAULT_DOWNLOAD_DIR), "download_dir"),
        bootstrap_dir=_resolve_dir(root, raw.get("bootstrap_dir", DEFAULT_BOOTSTRAP_DIR), "bootstrap_dir"),
        keep_downloads=keep_downloads,
        max_workers=_ensure_positive_int(raw.get("max_workers", DEFAULT_MAX_WORKERS), "max_workers"),
    )


def _default_config(root: Path) -> ScanvaultConfig:
    return ScanvaultConfig(
        storage=StorageConfig(directory=root / DEFAULT_STORAGE_DIR),
        download_dir=root / DEFAULT_DOWNLOAD_DIR,
        bootstrap_dir=root / DEFAULT_BOOTSTRAP_DIR,
    )


def _build_scanner_config(raw: dict[str, Any]) -> ScannerConfig:
    name = raw.get("name", DEFAULT_SCANNER_NAME)
    if not isinstance(name, str) or name not in VALID_SCANNERS:
        raise ConfigError(f"scanner.name must be one of {sorted(VALID_SCANNERS)}, got {name!r}")

    version = _optional_string(raw.get("version"), "scanner.version")
    requirement = _optional_string(raw.get("version_requirement"), "scanner.version_requirement")
    if requirement is not None:
        try:
            SpecifierSet(requirement)
        except InvalidSpecifier as exc:
            raise ConfigError(f"scanner.version_requirement is not a valid specifier: {requirement!r}") from exc

    options = raw.get("options")
    if options is not None:
        if not isinstance(options, dict) or not all(isinstance(key, str) for key in options):
            raise ConfigError("scanner.options must be a mapping with string keys")
        options = dict(options)

    processes = raw.get("processes")
    if processes is not None:
        processes = _ensure_positive_int(processes, "scanner.processes")

    return ScannerConfig(
        name=name,
        version=version,
        version_requirement=requirement,
        options=options,
        processes=processes,
    )


def _build_storage_config(raw: dict[str, Any], root: Path) -> StorageConfig:
    backend = raw.get("backend", DEFAULT_STORAGE_BACKEND)
    if not isinstance(backend, str) or backend not in VALID_STORAGE_BACKENDS:
        raise ConfigError(f"storage.backend must be one of {sorted(VALID_STORAGE_BACKENDS)}, got {backend!r}")

    url = _optional_string(raw.get("url"), "storage.url") or ""
    if backend == STORAGE_BACKEND_HTTP and not url:
        raise ConfigError("storage.url is required for the http backend")

    headers = raw.get("headers")
    if headers is not None:
        if not isinstance(headers, dict) or not all(
            isinstance(key, str) and isinstance(value, str) for key, value in headers.items()
        ):
            raise ConfigError("storage.headers must be a mapping of strings")
        headers = dict(headers)

    return StorageConfig(
        backend=backend,
        directory=_resolve_dir(root, raw.get("directory", DEFAULT_STORAGE_DIR), "storage.directory"),
        url=url.rstrip("/"),
        timeout=_ensure_positive_int(raw.get("timeout", DEFAULT_HTTP_STORAGE_TIMEOUT), "storage.timeout"),
        headers=headers,
    )


def _ensure_mapping(value: Any, key_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key_name} must be a mapping")
    return value


def _optional_string(value: Any, key_name: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{key_name} must be a non-empty string")
    return value.strip()


def _ensure_positive_int(value: Any, key_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{key_name} must be a positive integer")
    return value


def _resolve_dir(root: Path, value: Any, key_name: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{key_name} must be a non-empty path string")
    path = Path(value).expanduser()
    return path if path.is_absolute() else (root / path)
