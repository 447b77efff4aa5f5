"""Shared exception hierarchy for scanvault."""

from __future__ import annotations

from .base import ScanvaultError
from .config import ConfigError
from .scanning import DownloadError, ProvisionError, ScanError
from .storage import StoreError

__all__ = [
    "ConfigError",
    "DownloadError",
    "ProvisionError",
    "ScanError",
    "ScanvaultError",
    "StoreError",
]
