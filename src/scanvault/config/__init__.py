"""Configuration loading, validation, and fingerprinting for scanvault runs."""

from __future__ import annotations

from scanvault.config.fingerprint import configuration_fingerprint, effective_scanner_options
from scanvault.config.loader import load_config
from scanvault.config.model import ScannerConfig, ScanvaultConfig, StorageConfig
from scanvault.config.validator import validate_config_file

__all__ = [
    "ScannerConfig",
    "ScanvaultConfig",
    "StorageConfig",
    "configuration_fingerprint",
    "effective_scanner_options",
    "load_config",
    "validate_config_file",
]
