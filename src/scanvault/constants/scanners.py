"""Scanner engine names, versions and invocation defaults."""

from __future__ import annotations

import re
from re import Pattern

SCANNER_SCANCODE: str = "scancode"
SCANNER_SPDX_TAGS: str = "spdx-tags"
VALID_SCANNERS: frozenset[str] = frozenset({SCANNER_SCANCODE, SCANNER_SPDX_TAGS})
DEFAULT_SCANNER: str = SCANNER_SCANCODE

SCANCODE_COMMAND: str = "scancode"
SCANCODE_VERSION: str = "32.3.0"
SCANCODE_RESULT_FILE_EXT: str = "json"
SCANCODE_RELEASE_URL: str = (
    "https://github.com/aboutcode-org/scancode-toolkit/releases/download/"
    "v{version}/scancode-toolkit-v{version}_py3.12-linux.tar.gz"
)
SCANCODE_ARCHIVE_DIR: str = "scancode-toolkit-v{version}"
SCANCODE_DEFAULT_OPTIONS: dict[str, bool | int] = {
    "copyright": True,
    "license": True,
    "info": True,
    "strip_root": True,
    "timeout": 300,
}
SCANCODE_DEFAULT_PROCESSES: int = 4
# Extra wall clock allowed on top of ScanCode's per-file timeout.
SCANCODE_PROCESS_TIMEOUT_SECONDS: int = 6 * 60 * 60
SCANCODE_VERSION_TIMEOUT_SECONDS: int = 120
SCANCODE_DOWNLOAD_TIMEOUT_SECONDS: int = 300
SCANCODE_TIMEOUT_ERROR_PATTERN: Pattern[str] = re.compile(r"Processing interrupted: timeout after \d+ seconds")
SCANCODE_VERSION_PATTERN: Pattern[str] = re.compile(r"ScanCode version:?\s*(\S+)", re.IGNORECASE)

SPDX_TAGS_VERSION: str = "1.0.0"
SPDX_TAGS_RESULT_FILE_EXT: str = "json"
SPDX_TAGS_DEFAULT_OPTIONS: dict[str, int] = {"max_bytes": 32768}
SPDX_TAG_PATTERN: Pattern[str] = re.compile(
    r"SPDX-License-Identifier:\s*(?P<expr>[A-Za-z0-9.+\-()]+(?:\s+(?:AND|OR|WITH)\s+[A-Za-z0-9.+\-()]+)*)"
)
VCS_METADATA_DIRS: frozenset[str] = frozenset({".git", ".hg", ".svn", "CVS", ".bzr"})

ISSUE_SEVERITY_ERROR: str = "ERROR"
ISSUE_SEVERITY_WARNING: str = "WARNING"
ISSUE_SEVERITY_HINT: str = "HINT"
VALID_ISSUE_SEVERITIES: frozenset[str] = frozenset(
    {ISSUE_SEVERITY_ERROR, ISSUE_SEVERITY_WARNING, ISSUE_SEVERITY_HINT}
)

RESULTS_FILE_PREFIX: str = "scan-results_"
