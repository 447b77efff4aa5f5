"""Human-readable stdout reporter for scan records."""

from __future__ import annotations

from collections import Counter

from scanvault.constants.branding import ASCII_LOGO_LINES, SCAN_SUMMARY_TITLE
from scanvault.constants.reporting import (
    ANSI_DIM,
    ANSI_GREEN,
    ANSI_RED,
    ANSI_RESET,
    ANSI_YELLOW,
    TOP_LICENSES_LIMIT,
)
from scanvault.constants.scanners import ISSUE_SEVERITY_ERROR, ISSUE_SEVERITY_WARNING
from scanvault.model import Issue, ScanRecord, ScanResult


def _colorize(text: str, color: str) -> str:
    return f"{color}{text}{ANSI_RESET}"


class StdoutReporter:
    """Formats a scan record as a short terminal summary."""

    def __init__(self, record: ScanRecord, *, color: bool = True, verbose: bool = False) -> None:
        self._record = record
        self._color = color
        self._verbose = verbose

    def render(self) -> str:
        """Render the full stdout report as a single string."""
        sections = [self._render_header(), self._render_issues()]
        return "\n".join(section for section in sections if section)

    def _render_header(self) -> str:
        record = self._record
        stats = record.storage_stats
        sep = "  " + "─" * 38

        results = [result for container in record.scan_results for result in container.results]
        failed = sum(1 for container in record.scan_results if _is_failed(container.results))
        files = sum(result.summary.file_count for result in results)

        license_counts: Counter[str] = Counter()
        for result in results:
            license_counts.update(result.summary.licenses)

        failed_str = str(failed)
        if self._color:
            failed_str = _colorize(failed_str, ANSI_RED if failed else ANSI_GREEN)

        lines = [
            "",
            f"  {ASCII_LOGO_LINES[0]}",
            f"  {ASCII_LOGO_LINES[1]}",
            f"  {SCAN_SUMMARY_TITLE}",
            sep,
            "",
            f"  Packages    {len(record.scan_results)} scanned / {failed_str} failed",
            f"  Results     {len(results)}",
            f"  Files       {files}",
            f"  Issues      {record.issue_count}",
            f"  Licenses    {self._format_top_licenses(license_counts)}",
        ]
        if self._verbose or stats.num_reads:
            lines.append(
                f"  Cache       {stats.num_hits} hits / {stats.num_reads - stats.num_hits} misses"
                f" / {stats.num_writes} writes / {stats.num_write_failures} write failures"
            )
        lines.append("")
        return "\n".join(lines)

    def _render_issues(self) -> str:
        rows: list[str] = []
        for container in self._record.scan_results:
            for result in container.results:
                for issue in result.summary.issues:
                    rows.append(f"  {container.id}  {self._format_severity(issue)}  {issue.message}")
        if not rows:
            return ""
        return "\n".join(["  Issues", *rows, ""])

    def _format_severity(self, issue: Issue) -> str:
        severity = issue.severity or ISSUE_SEVERITY_ERROR
        if not self._color:
            return severity
        if severity == ISSUE_SEVERITY_ERROR:
            return _colorize(severity, ANSI_RED)
        if severity == ISSUE_SEVERITY_WARNING:
            return _colorize(severity, ANSI_YELLOW)
        return _colorize(severity, ANSI_DIM)

    @staticmethod
    def _format_top_licenses(counts: Counter[str]) -> str:
        if not counts:
            return "none"
        top = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:TOP_LICENSES_LIMIT]
        return ", ".join(f"{license_id} ({count})" for license_id, count in top)


def _is_failed(results: tuple[ScanResult, ...]) -> bool:
    return any(result.summary.file_count == 0 and result.summary.issues for result in results)
