"""Branding constants for terminal output."""

from __future__ import annotations

BRAND_NAME: str = "SCANVAULT"
ASCII_LOGO_LINES: tuple[str, ...] = (
    ">_ SCANVAULT",
    "     // cached license scans for third-party packages",
)
SCAN_SUMMARY_TITLE: str = "Scan summary"
CLI_DESCRIPTION: str = "\n".join((*ASCII_LOGO_LINES, "", f"{BRAND_NAME} license scanner"))
