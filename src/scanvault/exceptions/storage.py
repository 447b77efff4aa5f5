"""Result store exceptions."""

from __future__ import annotations

from scanvault.exceptions.base import ScanvaultError


class StoreError(ScanvaultError):
    """Raised by result store backends on read or write failures."""
