"""Scan result models: provenance, scanner identity, summaries and records."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from scanvault.constants.scanners import VALID_ISSUE_SEVERITIES
from scanvault.model.identifier import Identifier
from scanvault.model.package import RemoteArtifact, VcsInfo
from scanvault.types import IssueSeverity, JsonObject


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Render an ISO 8601 UTC timestamp with a ``Z`` suffix."""
    return as_utc(value).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: object) -> datetime:
    """Parse an ISO 8601 timestamp, raising ValueError on malformed input."""
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    return as_utc(datetime.fromisoformat(value))


@dataclass(frozen=True)
class Provenance:
    """Exactly which source snapshot was scanned."""

    download_time: datetime | None = None
    source_artifact: RemoteArtifact | None = None
    vcs_info: VcsInfo | None = None
    original_vcs_info: VcsInfo | None = None

    def to_dict(self) -> JsonObject:
        payload: JsonObject = {}
        if self.download_time is not None:
            payload["downloadTime"] = format_timestamp(self.download_time)
        if self.source_artifact is not None:
            payload["sourceArtifact"] = self.source_artifact.to_dict()
        if self.vcs_info is not None:
            payload["vcsInfo"] = self.vcs_info.to_dict()
        if self.original_vcs_info is not None:
            payload["originalVcsInfo"] = self.original_vcs_info.to_dict()
        return payload

    @classmethod
    def from_dict(cls, raw: JsonObject) -> Provenance:
        download_time = raw.get("downloadTime")
        source_artifact = raw.get("sourceArtifact")
        vcs_info = raw.get("vcsInfo")
        original_vcs_info = raw.get("originalVcsInfo")
        return cls(
            download_time=parse_timestamp(download_time) if download_time is not None else None,
            source_artifact=(
                RemoteArtifact.from_dict(source_artifact, "sourceArtifact") if source_artifact is not None else None
            ),
            vcs_info=VcsInfo.from_dict(vcs_info) if vcs_info is not None else None,
            original_vcs_info=VcsInfo.from_dict(original_vcs_info) if original_vcs_info is not None else None,
        )


@dataclass(frozen=True)
class ScannerDetails:
    """Identity of the tool, version and configuration that produced a scan."""

    name: str
    version: str
    configuration: str

    def to_dict(self) -> JsonObject:
        return {"name": self.name, "version": self.version, "configuration": self.configuration}

    @classmethod
    def from_dict(cls, raw: JsonObject) -> ScannerDetails:
        name = raw.get("name")
        version = raw.get("version")
        configuration = raw.get("configuration", "")
        if not isinstance(name, str) or not isinstance(version, str) or not isinstance(configuration, str):
            raise ValueError("scanner details require string name, version and configuration")
        return cls(name=name, version=version, configuration=configuration)

    def __str__(self) -> str:
        return f"{self.name} {self.version}"


@dataclass(frozen=True, order=True)
class TextLocation:
    """A file path with an optional line range."""

    path: str
    start_line: int = -1
    end_line: int = -1

    def to_dict(self) -> JsonObject:
        return {"path": self.path, "startLine": self.start_line, "endLine": self.end_line}

    @classmethod
    def from_dict(cls, raw: JsonObject) -> TextLocation:
        path = raw.get("path")
        start_line = raw.get("startLine", -1)
        end_line = raw.get("endLine", -1)
        if not isinstance(path, str) or not isinstance(start_line, int) or not isinstance(end_line, int):
            raise ValueError("location requires a string path and integer lines")
        return cls(path=path, start_line=start_line, end_line=end_line)


@dataclass(frozen=True, order=True)
class LicenseFinding:
    """A license detected at a location."""

    license: str
    location: TextLocation

    def to_dict(self) -> JsonObject:
        return {"license": self.license, "location": self.location.to_dict()}

    @classmethod
    def from_dict(cls, raw: JsonObject) -> LicenseFinding:
        license_id = raw.get("license")
        location = raw.get("location")
        if not isinstance(license_id, str) or not isinstance(location, dict):
            raise ValueError("license finding requires a license string and a location mapping")
        return cls(license=license_id, location=TextLocation.from_dict(location))


@dataclass(frozen=True)
class Issue:
    """A problem reported while downloading or scanning."""

    source: str
    message: str
    severity: IssueSeverity | None = None

    def sort_key(self) -> tuple[str, str, str]:
        return (self.message, self.source, self.severity or "")

    def to_dict(self) -> JsonObject:
        payload: JsonObject = {"source": self.source, "message": self.message}
        if self.severity is not None:
            payload["severity"] = self.severity
        return payload

    @classmethod
    def from_dict(cls, raw: JsonObject) -> Issue:
        source = raw.get("source")
        message = raw.get("message")
        severity = raw.get("severity")
        if not isinstance(source, str) or not isinstance(message, str):
            raise ValueError("issue requires string source and message")
        if severity is not None and severity not in VALID_ISSUE_SEVERITIES:
            raise ValueError(f"unknown issue severity {severity!r}")
        return cls(source=source, message=message, severity=severity)


@dataclass(frozen=True)
class ScanSummary:
    """Canonical summary of one scan."""

    start_time: datetime
    end_time: datetime
    file_count: int
    license_findings: tuple[LicenseFinding, ...] = ()
    issues: tuple[Issue, ...] = ()

    @property
    def licenses(self) -> tuple[str, ...]:
        """Distinct detected license ids in sorted order."""
        return tuple(sorted({finding.license for finding in self.license_findings}))

    def to_dict(self) -> JsonObject:
        return {
            "startTime": format_timestamp(self.start_time),
            "endTime": format_timestamp(self.end_time),
            "fileCount": self.file_count,
            "licenseFindings": [finding.to_dict() for finding in self.license_findings],
            "issues": [issue.to_dict() for issue in self.issues],
        }

    @classmethod
    def from_dict(cls, raw: JsonObject) -> ScanSummary:
        file_count = raw.get("fileCount")
        findings = raw.get("licenseFindings", [])
        issues = raw.get("issues", [])
        if isinstance(file_count, bool) or not isinstance(file_count, int):
            raise ValueError("summary.fileCount must be an integer")
        if not isinstance(findings, list) or not isinstance(issues, list):
            raise ValueError("summary.licenseFindings and summary.issues must be lists")
        if not all(isinstance(item, dict) for item in (*findings, *issues)):
            raise ValueError("summary.licenseFindings and summary.issues must hold mappings")
        return cls(
            start_time=parse_timestamp(raw.get("startTime")),
            end_time=parse_timestamp(raw.get("endTime")),
            file_count=file_count,
            license_findings=tuple(LicenseFinding.from_dict(item) for item in findings),
            issues=tuple(Issue.from_dict(item) for item in issues),
        )


@dataclass(frozen=True)
class ScanResult:
    """The unit persisted in result stores and returned to callers."""

    provenance: Provenance
    scanner: ScannerDetails
    summary: ScanSummary
    raw_result: JsonObject | None = field(default=None, compare=False, hash=False)

    def without_raw_result(self) -> ScanResult:
        """Drop the in-memory raw document; on-disk artifacts are untouched."""
        if self.raw_result is None:
            return self
        return replace(self, raw_result=None)

    def to_dict(self, *, include_raw: bool = True) -> JsonObject:
        payload: JsonObject = {
            "provenance": self.provenance.to_dict(),
            "scanner": self.scanner.to_dict(),
            "summary": self.summary.to_dict(),
        }
        if include_raw and self.raw_result is not None:
            payload["rawResult"] = self.raw_result
        return payload

    @classmethod
    def from_dict(cls, raw: JsonObject) -> ScanResult:
        if not isinstance(raw, dict):
            raise ValueError(f"scan result must be a mapping, got {type(raw).__name__}")
        provenance = raw.get("provenance", {})
        scanner = raw.get("scanner")
        summary = raw.get("summary")
        raw_result = raw.get("rawResult")
        if not isinstance(provenance, dict) or not isinstance(scanner, dict) or not isinstance(summary, dict):
            raise ValueError("scan result requires provenance, scanner and summary mappings")
        if raw_result is not None and not isinstance(raw_result, dict):
            raise ValueError("scan result rawResult must be a mapping")
        return cls(
            provenance=Provenance.from_dict(provenance),
            scanner=ScannerDetails.from_dict(scanner),
            summary=ScanSummary.from_dict(summary),
            raw_result=raw_result,
        )


@dataclass(frozen=True)
class AccessStatistics:
    """Snapshot of result store read/write counters."""

    num_reads: int = 0
    num_hits: int = 0
    num_writes: int = 0
    num_write_failures: int = 0

    def to_dict(self) -> JsonObject:
        return {
            "numReads": self.num_reads,
            "numHits": self.num_hits,
            "numWrites": self.num_writes,
            "numWriteFailures": self.num_write_failures,
        }


@dataclass(frozen=True)
class ScanResultContainer:
    """All scan results recorded for one identifier."""

    id: Identifier
    results: tuple[ScanResult, ...]

    def to_dict(self) -> JsonObject:
        return {
            "id": self.id.to_coordinates(),
            "results": [result.to_dict(include_raw=False) for result in self.results],
        }


@dataclass(frozen=True)
class ScanRecord:
    """Results of a scanner run together with result store statistics."""

    scan_results: tuple[ScanResultContainer, ...]
    storage_stats: AccessStatistics = AccessStatistics()

    @property
    def issue_count(self) -> int:
        return sum(len(result.summary.issues) for container in self.scan_results for result in container.results)

    def to_dict(self) -> JsonObject:
        return {
            "scanResults": [container.to_dict() for container in self.scan_results],
            "storageStats": self.storage_stats.to_dict(),
        }
