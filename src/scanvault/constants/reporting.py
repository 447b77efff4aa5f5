"""Constants for report file names, atomic writing, and stdout formatting."""

from __future__ import annotations

SCAN_RECORD_FILENAME: str = "scan-record.json"
REPORT_TEMP_PREFIX: str = ".tmp-"
REPORT_TEMP_SUFFIX: str = ".json"

TOP_LICENSES_LIMIT: int = 5

# ANSI escape codes for terminal colouring.
ANSI_RESET: str = "\033[0m"
ANSI_RED: str = "\033[31;1m"
ANSI_YELLOW: str = "\033[33;1m"
ANSI_GREEN: str = "\033[32;1m"
ANSI_DIM: str = "\033[2m"
