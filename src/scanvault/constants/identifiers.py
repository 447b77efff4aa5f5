"""Constants for package identifiers and their path renderings."""

from __future__ import annotations

ID_SEPARATOR: str = ":"
ID_FIELD_COUNT: int = 4
UNKNOWN_PATH_COMPONENT: str = "unknown"
