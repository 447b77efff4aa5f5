"""Built-in engine reading ``SPDX-License-Identifier`` tags from source files."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from scanvault.constants.scanners import (
    ISSUE_SEVERITY_WARNING,
    SCANNER_SPDX_TAGS,
    SPDX_TAG_PATTERN,
    SPDX_TAGS_DEFAULT_OPTIONS,
    SPDX_TAGS_RESULT_FILE_EXT,
    SPDX_TAGS_VERSION,
    VCS_METADATA_DIRS,
)
from scanvault.exceptions import ScanError
from scanvault.model import Issue, LicenseFinding, ScanSummary, TextLocation, utc_now
from scanvault.scanner.engines.base import ScannerEngine
from scanvault.scanner.normalizer import normalize_summary
from scanvault.types import JsonObject, JsonValue

logger = logging.getLogger(__name__)


@dataclass
class _WalkContext:
    """Mutable state of one tree walk."""

    root: Path
    max_bytes: int
    seen_dirs: set[tuple[int, int]] = field(default_factory=set)
    files: list[JsonObject] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class SpdxTagEngine(ScannerEngine):
    """Detect licenses from SPDX short-form identifiers without an external tool."""

    name = SCANNER_SPDX_TAGS
    result_file_ext = SPDX_TAGS_RESULT_FILE_EXT
    default_options: dict[str, JsonValue] = dict(SPDX_TAGS_DEFAULT_OPTIONS)

    def __init__(
        self,
        *,
        version: str = SPDX_TAGS_VERSION,
        version_requirement: str | None = None,
        options: dict[str, JsonValue] | None = None,
    ) -> None:
        super().__init__(version=version, version_requirement=version_requirement, options=options)

    @property
    def max_bytes(self) -> int:
        value = self.options.get("max_bytes")
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
        return int(SPDX_TAGS_DEFAULT_OPTIONS["max_bytes"])

    def invoke(self, path: Path, results_file: Path) -> tuple[datetime, datetime]:
        if not path.exists():
            raise ScanError(f"Cannot scan missing path {path}")

        start_time = utc_now()
        context = _WalkContext(root=path, max_bytes=self.max_bytes)
        if path.is_file():
            _scan_file(path, path.name, context)
        else:
            _walk(path, context)
        end_time = utc_now()

        raw: JsonObject = {
            "tool": self.name,
            "version": self.version,
            "files_count": len(context.files),
            "files": context.files,
            "errors": context.errors,
        }
        try:
            self.write_result(results_file, raw)
        except OSError as exc:
            raise ScanError(f"Could not write results file {results_file}: {exc}") from exc
        return start_time, end_time

    def generate_summary(self, start_time: datetime, end_time: datetime, raw: JsonObject) -> ScanSummary:
        files = raw.get("files")
        file_count = raw.get("files_count")
        if not isinstance(files, list) or not isinstance(file_count, int):
            raise ScanError("SPDX tag result is missing its files list or count")

        findings: list[LicenseFinding] = []
        for entry in files:
            if not isinstance(entry, dict):
                continue
            path = str(entry.get("path", ""))
            for tag in entry.get("tags") or []:
                if not isinstance(tag, dict) or not isinstance(tag.get("license"), str):
                    continue
                line = tag.get("line", -1)
                line = line if isinstance(line, int) else -1
                findings.append(
                    LicenseFinding(license=tag["license"], location=TextLocation(path, line, line))
                )

        issues = [
            Issue(source=self.name, message=str(message), severity=ISSUE_SEVERITY_WARNING)
            for message in raw.get("errors") or []
        ]
        return normalize_summary(
            start_time=start_time,
            end_time=end_time,
            file_count=file_count,
            license_findings=findings,
            issues=issues,
        )


def _walk(directory: Path, context: _WalkContext) -> None:
    try:
        stat = directory.stat()
    except OSError as exc:
        context.errors.append(f"{_relative(directory, context)}: {exc.strerror or exc}")
        return

    # Symlinked directories can form cycles.
    identity = (stat.st_dev, stat.st_ino)
    if identity in context.seen_dirs:
        return
    context.seen_dirs.add(identity)

    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError as exc:
        context.errors.append(f"{_relative(directory, context)}: {exc.strerror or exc}")
        return

    for entry in entries:
        entry_path = Path(entry.path)
        if entry.is_dir():
            if entry.name not in VCS_METADATA_DIRS:
                _walk(entry_path, context)
        elif entry.is_file():
            _scan_file(entry_path, _relative(entry_path, context), context)


def _scan_file(path: Path, relative_path: str, context: _WalkContext) -> None:
    try:
        with path.open("rb") as handle:
            head = handle.read(context.max_bytes)
    except OSError as exc:
        context.errors.append(f"{relative_path}: {exc.strerror or exc}")
        return

    text = head.decode("utf-8", errors="replace")
    tags: list[JsonObject] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        match = SPDX_TAG_PATTERN.search(line)
        if match:
            tags.append({"license": match.group("expr").strip(), "line": line_number})

    context.files.append({"path": relative_path, "tags": tags})


def _relative(path: Path, context: _WalkContext) -> str:
    try:
        return path.relative_to(context.root).as_posix()
    except ValueError:
        return path.as_posix()
