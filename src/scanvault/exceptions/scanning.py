"""Exceptions raised while provisioning, downloading and scanning packages."""

from __future__ import annotations

from scanvault.exceptions.base import ScanvaultError


class ProvisionError(ScanvaultError):
    """Raised when the required scanner version cannot be made available.

    This is fatal for the whole run of the affected scanner.
    """


class DownloadError(ScanvaultError):
    """Raised when a package's source code cannot be downloaded."""


class ScanError(ScanvaultError):
    """Raised when a scanner invocation fails or produces unusable output."""
