"""String normalization helpers for output names and path components."""

from __future__ import annotations

from urllib.parse import quote

from scanvault.constants.naming import (
    COLLAPSE_DASH_PATTERN,
    NON_OUTPUT_NAME_PATTERN,
    OUTPUT_NAME_FALLBACK,
)


def file_system_encode(value: str) -> str:
    """Percent-encode a value so it is safe as a single path component.

    The result never contains path separators or the identifier field separator.
    """
    encoded = quote(value, safe=" -_.~+")
    if encoded in {".", ".."}:
        encoded = encoded.replace(".", "%2E")
    return encoded


def sanitize_output_name(raw_name: str) -> str:
    """Normalize names for stable output file names."""
    normalized = raw_name.strip()
    normalized = NON_OUTPUT_NAME_PATTERN.sub("-", normalized)
    normalized = COLLAPSE_DASH_PATTERN.sub("-", normalized)
    normalized = normalized.strip("-._")
    return normalized or OUTPUT_NAME_FALLBACK
