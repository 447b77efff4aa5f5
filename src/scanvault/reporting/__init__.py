"""Reporting outputs for scanvault."""

from .stdout import StdoutReporter
from .writer import write_scan_record

__all__ = ["StdoutReporter", "write_scan_record"]
