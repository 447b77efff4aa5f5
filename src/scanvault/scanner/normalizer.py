"""Canonical scan summary construction."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from scanvault.io import canonical_json
from scanvault.model import Issue, LicenseFinding, ScanSummary
from scanvault.model.scan import as_utc

logger = logging.getLogger(__name__)


def normalize_summary(
    *,
    start_time: datetime,
    end_time: datetime,
    file_count: int,
    license_findings: Iterable[LicenseFinding] = (),
    issues: Iterable[Issue] = (),
) -> ScanSummary:
    """Build a ScanSummary with a deterministic, tool-independent shape.

    Findings are deduplicated and sorted by license then location. Issues are
    sorted by message, source and severity but are never dropped or merged.
    Naive datetimes are read as UTC, and an end time before the start time is
    clamped to the start time.
    """
    start = as_utc(start_time)
    end = as_utc(end_time)
    if end < start:
        logger.debug("Clamping scan end time %s to start time %s.", end, start)
        end = start

    return ScanSummary(
        start_time=start,
        end_time=end,
        file_count=max(file_count, 0),
        license_findings=tuple(sorted(set(license_findings))),
        issues=tuple(sorted(issues, key=Issue.sort_key)),
    )


def summary_to_json(summary: ScanSummary) -> str:
    """Serialize a summary canonically; equal summaries give identical text."""
    return canonical_json(summary.to_dict())
