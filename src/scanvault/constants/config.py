"""Configuration defaults and filenames."""

from __future__ import annotations

from scanvault.constants.cache import STORAGE_BACKEND_LOCAL
from scanvault.constants.scanners import DEFAULT_SCANNER

CONFIG_FILENAME: str = "scanvault.yaml"

DEFAULT_STATE_DIR: str = ".scanvault"
DEFAULT_STORAGE_BACKEND: str = STORAGE_BACKEND_LOCAL
DEFAULT_STORAGE_DIR: str = f"{DEFAULT_STATE_DIR}/scan-results"
DEFAULT_DOWNLOAD_DIR: str = f"{DEFAULT_STATE_DIR}/downloads"
DEFAULT_BOOTSTRAP_DIR: str = f"{DEFAULT_STATE_DIR}/tools"
DEFAULT_MAX_WORKERS: int = 1
DEFAULT_SCANNER_NAME: str = DEFAULT_SCANNER
