"""Capability interface implemented by every scanner engine."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from scanvault.config import configuration_fingerprint, effective_scanner_options
from scanvault.constants.reporting import REPORT_TEMP_PREFIX, REPORT_TEMP_SUFFIX
from scanvault.constants.scanners import RESULTS_FILE_PREFIX
from scanvault.exceptions import ProvisionError, ScanError
from scanvault.io import load_json_file, write_json_atomic
from scanvault.model import ScannerDetails, ScanSummary
from scanvault.types import JsonObject, JsonValue

logger = logging.getLogger(__name__)


class ScannerEngine(ABC):
    """One license scanner tool.

    Subclasses declare their name, version and default options and implement
    invocation and summary generation. Everything result-affecting must be
    reflected in :meth:`configuration` so that cache keys change with it.
    """

    name: str = ""
    result_file_ext: str = "json"
    default_options: dict[str, JsonValue] = {}

    def __init__(
        self,
        *,
        version: str,
        version_requirement: str | None = None,
        options: dict[str, JsonValue] | None = None,
    ) -> None:
        self.version = version
        self.version_requirement = version_requirement or f"=={version}"
        self.options = effective_scanner_options(self.default_options, options)
        self.scanner_dir: Path | None = None
        self.resolved_version: str | None = None

    def command(self) -> str:
        """Return the executable name, or an empty string for library-only engines."""
        return ""

    def get_version(self, directory: Path | None = None) -> str:
        """Return the version reported by the tool found in *directory*."""
        return self.version

    def bootstrap(self, target_dir: Path) -> Path:
        """Install the required version under *target_dir* and return its directory."""
        raise ProvisionError(f"Scanner '{self.name}' cannot be bootstrapped automatically")

    def configuration(self) -> str:
        return configuration_fingerprint(self.options)

    def details(self) -> ScannerDetails:
        """Identify the scans of this engine by the tool version actually in use."""
        version = self.resolved_version or self.version
        return ScannerDetails(name=self.name, version=version, configuration=self.configuration())

    def results_file_name(self, stem: str = "") -> str:
        """Return the raw artifact name for this engine."""
        prefix = f"{stem}_" if stem else RESULTS_FILE_PREFIX
        return f"{prefix}{self.name}.{self.result_file_ext}"

    @abstractmethod
    def invoke(self, path: Path, results_file: Path) -> tuple[datetime, datetime]:
        """Scan *path*, write the raw result to *results_file* and return start and end times.

        Raises ScanError when the tool fails or writes nothing usable.
        """

    def read_result(self, results_file: Path) -> JsonObject:
        try:
            raw = load_json_file(results_file)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ScanError(f"Could not read raw result {results_file}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ScanError(f"Raw result {results_file} is not a JSON object")
        return raw

    def write_result(self, results_file: Path, raw: JsonObject) -> None:
        write_json_atomic(path=results_file, payload=raw, temp_prefix=REPORT_TEMP_PREFIX, temp_suffix=REPORT_TEMP_SUFFIX)

    @abstractmethod
    def generate_summary(self, start_time: datetime, end_time: datetime, raw: JsonObject) -> ScanSummary:
        """Map the tool's raw output to a normalized ScanSummary."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(version={self.version!r})"
