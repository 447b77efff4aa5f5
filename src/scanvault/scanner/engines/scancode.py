"""ScanCode toolkit engine."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

import requests

from scanvault.constants.download import DOWNLOAD_CHUNK_SIZE
from scanvault.constants.scanners import (
    ISSUE_SEVERITY_ERROR,
    ISSUE_SEVERITY_WARNING,
    SCANCODE_ARCHIVE_DIR,
    SCANCODE_COMMAND,
    SCANCODE_DEFAULT_OPTIONS,
    SCANCODE_DEFAULT_PROCESSES,
    SCANCODE_DOWNLOAD_TIMEOUT_SECONDS,
    SCANCODE_PROCESS_TIMEOUT_SECONDS,
    SCANCODE_RELEASE_URL,
    SCANCODE_RESULT_FILE_EXT,
    SCANCODE_TIMEOUT_ERROR_PATTERN,
    SCANCODE_VERSION,
    SCANCODE_VERSION_PATTERN,
    SCANCODE_VERSION_TIMEOUT_SECONDS,
    SCANNER_SCANCODE,
)
from scanvault.exceptions import ProvisionError, ScanError
from scanvault.io import extract_archive
from scanvault.model import Issue, LicenseFinding, ScanSummary, TextLocation, utc_now
from scanvault.scanner.engines.base import ScannerEngine
from scanvault.scanner.normalizer import normalize_summary
from scanvault.types import JsonObject, JsonValue

logger = logging.getLogger(__name__)

_SPDX_EXPRESSION_KEYS = ("license_expression_spdx", "spdx_license_expression")
_LEGACY_LICENSE_KEYS = ("spdx_license_key", "license_expression_spdx", "key")


class ScanCodeEngine(ScannerEngine):
    """Run the ``scancode`` command line tool and read its JSON output."""

    name = SCANNER_SCANCODE
    result_file_ext = SCANCODE_RESULT_FILE_EXT
    default_options: dict[str, JsonValue] = dict(SCANCODE_DEFAULT_OPTIONS)

    def __init__(
        self,
        *,
        version: str = SCANCODE_VERSION,
        version_requirement: str | None = None,
        options: dict[str, JsonValue] | None = None,
        processes: int | None = None,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(version=version, version_requirement=version_requirement, options=options)
        # Only affects speed, so it stays out of the configuration fingerprint.
        self.processes = processes or SCANCODE_DEFAULT_PROCESSES
        self.session = session or requests.Session()

    def command(self) -> str:
        return SCANCODE_COMMAND

    def option_args(self) -> list[str]:
        """Render result-affecting options as command line arguments."""
        args: list[str] = []
        for key, value in self.options.items():
            flag = "--" + key.replace("_", "-")
            if value is True:
                args.append(flag)
            elif isinstance(value, list):
                for item in value:
                    args.extend([flag, str(item)])
            else:
                args.extend([flag, str(value)])
        return args

    def executable(self) -> str:
        if self.scanner_dir is not None:
            return str(self.scanner_dir / SCANCODE_COMMAND)
        return SCANCODE_COMMAND

    def get_version(self, directory: Path | None = None) -> str:
        executable = str(directory / SCANCODE_COMMAND) if directory else self.executable()
        try:
            completed = subprocess.run(
                [executable, "--version"],
                capture_output=True,
                text=True,
                check=False,
                timeout=SCANCODE_VERSION_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ProvisionError(f"Could not run '{executable} --version': {exc}") from exc

        match = SCANCODE_VERSION_PATTERN.search(completed.stdout)
        if completed.returncode != 0 or match is None:
            raise ProvisionError(
                f"Could not determine the ScanCode version from '{executable}': "
                f"{(completed.stderr or completed.stdout).strip()}"
            )
        return match.group(1)

    def bootstrap(self, target_dir: Path) -> Path:
        """Download and unpack the ScanCode release for the required version."""
        url = SCANCODE_RELEASE_URL.format(version=self.version)
        scanner_dir = target_dir / SCANCODE_ARCHIVE_DIR.format(version=self.version)
        if (scanner_dir / SCANCODE_COMMAND).is_file():
            logger.info("Reusing ScanCode %s unpacked at %s.", self.version, scanner_dir)
            return scanner_dir

        logger.info("Downloading ScanCode %s from %s.", self.version, url)
        target_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=target_dir) as temp_dir:
            archive = Path(temp_dir) / url.rsplit("/", 1)[-1]
            try:
                with self.session.get(url, stream=True, timeout=SCANCODE_DOWNLOAD_TIMEOUT_SECONDS) as response:
                    response.raise_for_status()
                    with archive.open("wb") as handle:
                        for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                            handle.write(chunk)
            except requests.RequestException as exc:
                raise ProvisionError(f"Could not download ScanCode {self.version}: {exc}") from exc

            try:
                extract_archive(archive, target_dir)
            except (OSError, ValueError) as exc:
                raise ProvisionError(f"Could not unpack ScanCode {self.version}: {exc}") from exc

        if not (scanner_dir / SCANCODE_COMMAND).is_file():
            raise ProvisionError(f"ScanCode archive did not contain {scanner_dir / SCANCODE_COMMAND}")
        return scanner_dir

    def invoke(self, path: Path, results_file: Path) -> tuple[datetime, datetime]:
        results_file.parent.mkdir(parents=True, exist_ok=True)
        args = [
            self.executable(),
            *self.option_args(),
            "--processes",
            str(self.processes),
            "--json-pp",
            str(results_file),
            str(path),
        ]
        logger.debug("Running %s", " ".join(args))

        start_time = utc_now()
        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                check=False,
                timeout=SCANCODE_PROCESS_TIMEOUT_SECONDS,
            )
        except subprocess.TimeoutExpired as exc:
            raise ScanError(f"ScanCode timed out after {exc.timeout} seconds scanning {path}") from exc
        except OSError as exc:
            raise ScanError(f"Could not run ScanCode: {exc}") from exc
        end_time = utc_now()

        if completed.returncode != 0:
            if not results_file.is_file():
                raise ScanError(
                    f"ScanCode exited with code {completed.returncode}: {completed.stderr.strip()}"
                )
            # Errors for individual files still produce a usable result.
            logger.warning(
                "ScanCode exited with code %s for %s; reading partial results.",
                completed.returncode,
                path,
            )
        elif not results_file.is_file():
            raise ScanError(f"ScanCode did not write a results file to {results_file}")

        return start_time, end_time

    def generate_summary(self, start_time: datetime, end_time: datetime, raw: JsonObject) -> ScanSummary:
        files = raw.get("files") or []
        if not isinstance(files, list):
            raise ScanError("ScanCode result has no files list")

        findings: list[LicenseFinding] = []
        issues: list[Issue] = []
        for entry in files:
            if not isinstance(entry, dict):
                continue
            path = str(entry.get("path", ""))
            findings.extend(_file_findings(entry, path))
            for message in entry.get("scan_errors") or []:
                issues.append(self._issue(f"{path}: {message}"))

        for message in _header(raw).get("errors") or []:
            issues.append(self._issue(str(message)))

        return normalize_summary(
            start_time=start_time,
            end_time=end_time,
            file_count=_file_count(raw, files),
            license_findings=findings,
            issues=issues,
        )

    def _issue(self, message: str) -> Issue:
        severity = ISSUE_SEVERITY_WARNING if SCANCODE_TIMEOUT_ERROR_PATTERN.search(message) else ISSUE_SEVERITY_ERROR
        return Issue(source=self.name, message=message, severity=severity)


def _header(raw: JsonObject) -> dict[str, Any]:
    headers = raw.get("headers")
    if isinstance(headers, list) and headers and isinstance(headers[0], dict):
        return headers[0]
    return {}


def _file_count(raw: JsonObject, files: list[Any]) -> int:
    extra_data = _header(raw).get("extra_data")
    if isinstance(extra_data, dict):
        count = extra_data.get("files_count")
        if isinstance(count, int) and not isinstance(count, bool):
            return count
    return sum(1 for entry in files if isinstance(entry, dict) and entry.get("type") == "file")


def _file_findings(entry: dict[str, Any], path: str) -> list[LicenseFinding]:
    findings: list[LicenseFinding] = []

    for detection in entry.get("license_detections") or []:
        if not isinstance(detection, dict):
            continue
        detection_license = _first_string(detection, _SPDX_EXPRESSION_KEYS)
        for match in detection.get("matches") or []:
            if not isinstance(match, dict):
                continue
            license_id = _first_string(match, _SPDX_EXPRESSION_KEYS) or detection_license
            if license_id:
                findings.append(LicenseFinding(license=license_id, location=_location(match, path)))

    for legacy in entry.get("licenses") or []:
        if not isinstance(legacy, dict):
            continue
        license_id = _first_string(legacy, _LEGACY_LICENSE_KEYS)
        if license_id:
            findings.append(LicenseFinding(license=license_id, location=_location(legacy, path)))

    return findings


def _location(match: dict[str, Any], path: str) -> TextLocation:
    start_line = match.get("start_line", -1)
    end_line = match.get("end_line", -1)
    return TextLocation(
        path=path,
        start_line=start_line if isinstance(start_line, int) else -1,
        end_line=end_line if isinstance(end_line, int) else -1,
    )


def _first_string(mapping: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = mapping.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
