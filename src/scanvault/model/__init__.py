"""Core data models for scanvault."""

from .identifier import Identifier
from .package import Package, RemoteArtifact, VcsInfo, load_packages
from .scan import (
    AccessStatistics,
    Issue,
    LicenseFinding,
    Provenance,
    ScannerDetails,
    ScanRecord,
    ScanResult,
    ScanResultContainer,
    ScanSummary,
    TextLocation,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

__all__ = [
    "AccessStatistics",
    "Identifier",
    "Issue",
    "LicenseFinding",
    "Package",
    "Provenance",
    "RemoteArtifact",
    "ScanRecord",
    "ScanResult",
    "ScanResultContainer",
    "ScanSummary",
    "ScannerDetails",
    "TextLocation",
    "VcsInfo",
    "format_timestamp",
    "load_packages",
    "parse_timestamp",
    "utc_now",
]
