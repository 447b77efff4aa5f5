"""Configuration-related exceptions."""

from __future__ import annotations

from scanvault.exceptions.base import ScanvaultError


class ConfigError(ScanvaultError, ValueError):
    """Raised when configuration or scan input is invalid."""
