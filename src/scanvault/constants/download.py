"""Constants for source downloads."""

from __future__ import annotations

import re
from re import Pattern

VCS_TYPE_GIT: str = "git"
SUPPORTED_VCS_TYPES: frozenset[str] = frozenset({VCS_TYPE_GIT})

DOWNLOAD_CHUNK_SIZE: int = 65536
DEFAULT_DOWNLOAD_TIMEOUT_SECONDS: int = 120
GIT_TIMEOUT_SECONDS: int = 15 * 60
SCRATCH_DIR_PREFIX: str = "scan-"

ARCHIVE_ZIP_SUFFIXES: tuple[str, ...] = (".zip", ".jar", ".whl")
ARCHIVE_TAR_SUFFIXES: tuple[str, ...] = (".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz", ".txz")

GITHUB_SCP_PATTERN: Pattern[str] = re.compile(r"^(?:ssh://)?git@github\.com[:/](?P<path>.+)$")
GIT_PROTOCOL_PATTERN: Pattern[str] = re.compile(r"^git://(?P<rest>.+)$")
