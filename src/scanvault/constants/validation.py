"""Stable validation error codes and allowed-key sets for config validation."""

from __future__ import annotations

CFG001: str = "CFG001"  # config file not found (explicit --config)
CFG002: str = "CFG002"  # invalid YAML parse
CFG003: str = "CFG003"  # top-level value is not a mapping
CFG004: str = "CFG004"  # unknown key
CFG005: str = "CFG005"  # invalid value type
CFG006: str = "CFG006"  # invalid enum value
CFG007: str = "CFG007"  # value out of range
CFG008: str = "CFG008"  # invalid version requirement
CFG009: str = "CFG009"  # invalid nested mapping

ALLOWED_CONFIG_KEYS: frozenset[str] = frozenset(
    {
        "scanner",
        "storage",
        "download_dir",
        "bootstrap_dir",
        "keep_downloads",
        "max_workers",
    }
)

ALLOWED_SCANNER_KEYS: frozenset[str] = frozenset(
    {
        "name",
        "version",
        "version_requirement",
        "options",
        "processes",
    }
)

ALLOWED_STORAGE_KEYS: frozenset[str] = frozenset(
    {
        "backend",
        "directory",
        "url",
        "timeout",
        "headers",
    }
)

PATH_KEYS: tuple[str, ...] = ("download_dir", "bootstrap_dir")
POSITIVE_INT_KEYS: tuple[str, ...] = ("max_workers",)
