"""Base exception for scanvault."""

from __future__ import annotations


class ScanvaultError(Exception):
    """Root of all scanvault errors."""
