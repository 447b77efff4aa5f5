"""Output writer for the scan record JSON artifact."""

from __future__ import annotations

from pathlib import Path

from scanvault.constants.reporting import REPORT_TEMP_PREFIX, REPORT_TEMP_SUFFIX, SCAN_RECORD_FILENAME
from scanvault.io import write_json_atomic
from scanvault.model import ScanRecord


def write_scan_record(out_root: Path, record: ScanRecord) -> Path:
    """Write ``scan-record.json`` under *out_root* and return its path."""
    out_root.mkdir(parents=True, exist_ok=True)
    path = out_root / SCAN_RECORD_FILENAME
    write_json_atomic(
        path=path,
        payload=record.to_dict(),
        temp_prefix=REPORT_TEMP_PREFIX,
        temp_suffix=REPORT_TEMP_SUFFIX,
    )
    return path
