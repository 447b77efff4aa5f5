"""Cache-aware scan orchestration for scanvault.

``ScanPipeline.scan_packages`` is the primary entry point: every package is
looked up in the result store first and only downloaded and scanned on a
miss. ``ScanPipeline.scan_path`` scans a local path without any store.
"""

from __future__ import annotations

import logging
import platform
import shutil
import tempfile
import threading
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from enum import StrEnum
from pathlib import Path

from scanvault.constants.download import SCRATCH_DIR_PREFIX
from scanvault.constants.scanners import ISSUE_SEVERITY_ERROR
from scanvault.exceptions import ConfigError, DownloadError, ProvisionError, ScanError
from scanvault.model import (
    Identifier,
    Issue,
    Package,
    Provenance,
    ScannerDetails,
    ScanRecord,
    ScanResult,
    ScanResultContainer,
    ScanSummary,
    utc_now,
)
from scanvault.scanner.downloader import Downloader
from scanvault.scanner.engines import ScannerEngine
from scanvault.scanner.inflight import InFlightRegistry
from scanvault.scanner.provisioner import ScannerProvisioner
from scanvault.storage import ScanResultStorage, derive_cache_key
from scanvault.utils import file_system_encode, sanitize_output_name

logger = logging.getLogger(__name__)


class PackageScanState(StrEnum):
    LOOKUP = "lookup"
    DOWNLOADING = "downloading"
    SCANNING = "scanning"
    NORMALIZING = "normalizing"
    STORING = "storing"
    DONE = "done"
    FAILED = "failed"


class ScanPipeline:
    """Drive packages through lookup, download, scan, normalization and storage."""

    def __init__(
        self,
        engine: ScannerEngine,
        storage: ScanResultStorage,
        downloader: Downloader,
        *,
        output_dir: Path,
        download_dir: Path,
        max_workers: int = 1,
        keep_downloads: bool = False,
        provisioner: ScannerProvisioner | None = None,
    ) -> None:
        if max_workers < 1:
            raise ConfigError(f"max_workers must be a positive integer, got {max_workers}")
        self.engine = engine
        self.storage = storage
        self.downloader = downloader
        self.output_dir = output_dir
        self.download_dir = download_dir
        self.max_workers = max_workers
        self.keep_downloads = keep_downloads
        self.provisioner = provisioner or ScannerProvisioner(engine, download_dir)
        self._inflight: InFlightRegistry[list[ScanResult]] = InFlightRegistry()
        self._states: dict[Identifier, PackageScanState] = {}
        self._states_lock = threading.Lock()

    @property
    def states(self) -> dict[Identifier, PackageScanState]:
        """Last state reached by each identifier handled so far."""
        with self._states_lock:
            return dict(self._states)

    def scan_packages(self, packages: Iterable[Package]) -> dict[Package, list[ScanResult]]:
        """Return scan results for every package, in input order.

        Raises ProvisionError when the scanner cannot be made available. Any
        other per-package problem becomes a result carrying one issue.
        """
        package_list = list(packages)
        self.provisioner.resolve()
        details = self.engine.details()
        logger.info("Scanning %d package(s) with %s.", len(package_list), details)

        total = len(package_list)
        if self.max_workers > 1 and total > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [
                    pool.submit(self._scan_isolated, package, details, index, total)
                    for index, package in enumerate(package_list, start=1)
                ]
                outcomes = [future.result() for future in futures]
        else:
            outcomes = [
                self._scan_isolated(package, details, index, total)
                for index, package in enumerate(package_list, start=1)
            ]

        results: dict[Package, list[ScanResult]] = {}
        for package, package_results in zip(package_list, outcomes, strict=True):
            results[package] = [result.without_raw_result() for result in package_results]
        return results

    def scan_path(self, input_path: Path) -> ScanRecord:
        """Scan a local file or directory without consulting the result store."""
        absolute_path = input_path.absolute()
        if not absolute_path.exists():
            raise ConfigError(f"Specified path '{absolute_path}' does not exist.")

        self.provisioner.resolve()
        details = self.engine.details()
        logger.info("Scanning path '%s' with %s.", absolute_path, details)

        stem = sanitize_output_name(absolute_path.stem)
        results_file = self.output_dir / self.engine.results_file_name(stem)
        try:
            result = self._scan(absolute_path, results_file, details)
            logger.info(
                "Detected licenses for path '%s': %s",
                absolute_path,
                ", ".join(result.summary.licenses) or "none",
            )
        except ScanError as exc:
            logger.error("Could not scan path '%s': %s", absolute_path, exc)
            result = self._failure_result(details, str(exc))
        except Exception as exc:
            logger.exception("Could not scan path '%s': %s", absolute_path, exc)
            result = self._failure_result(details, str(exc))

        # Arbitrary paths have no package identifier, so synthesize one without ':'.
        identifier = Identifier(
            type=file_system_encode(platform.system()),
            namespace=file_system_encode(str(absolute_path.parent)),
            name=file_system_encode(absolute_path.name),
            version="",
        )
        container = ScanResultContainer(id=identifier, results=(result.without_raw_result(),))
        return ScanRecord(scan_results=(container,), storage_stats=self.storage.stats())

    def _scan_isolated(
        self,
        package: Package,
        details: ScannerDetails,
        index: int,
        total: int,
    ) -> list[ScanResult]:
        logger.info("Starting scan of '%s' (%d/%d).", package.id, index, total)
        key = derive_cache_key(package.id, details)
        try:
            results = self._inflight.run(key, lambda: self._scan_package(package, details))
        except ProvisionError:
            raise
        except Exception as exc:
            logger.exception("Could not scan '%s': %s", package.id, exc)
            self._set_state(package.id, PackageScanState.FAILED)
            return [self._failure_result(details, str(exc))]

        logger.info("Finished scan of '%s' (%d/%d).", package.id, index, total)
        return list(results)

    def _scan_package(self, package: Package, details: ScannerDetails) -> list[ScanResult]:
        identifier = package.id
        results_file = self.output_dir / identifier.to_path() / self.engine.results_file_name()

        self._set_state(identifier, PackageScanState.LOOKUP)
        stored = self.storage.read(identifier, details)
        if stored:
            logger.info("Using %d stored scan result(s) for '%s'.", len(stored), identifier)
            self._restore_raw_result(stored[0], results_file)
            self._set_state(identifier, PackageScanState.DONE)
            return list(stored)

        self._set_state(identifier, PackageScanState.DOWNLOADING)
        self.download_dir.mkdir(parents=True, exist_ok=True)
        scratch_dir = Path(tempfile.mkdtemp(prefix=SCRATCH_DIR_PREFIX, dir=self.download_dir))
        try:
            try:
                download = self.downloader.download(package, scratch_dir)
            except DownloadError as exc:
                logger.error("Could not download '%s': %s", identifier, exc)
                self._set_state(identifier, PackageScanState.FAILED)
                return [self._failure_result(details, str(exc))]

            self._set_state(identifier, PackageScanState.SCANNING)
            logger.info("Running %s on directory '%s'.", details, download.download_directory)
            try:
                result = self._scan(download.download_directory, results_file, details, identifier)
            except ScanError as exc:
                logger.error("Could not scan '%s': %s", identifier, exc)
                self._set_state(identifier, PackageScanState.FAILED)
                return [self._failure_result(details, str(exc))]
        finally:
            if self.keep_downloads:
                logger.debug("Keeping downloaded sources of '%s' in %s.", identifier, scratch_dir)
            else:
                shutil.rmtree(scratch_dir, ignore_errors=True)

        result = replace(
            result,
            provenance=Provenance(
                download_time=download.date_time,
                source_artifact=download.source_artifact,
                vcs_info=download.vcs_info,
                original_vcs_info=download.original_vcs_info,
            ),
        )

        self._set_state(identifier, PackageScanState.STORING)
        if not self.storage.write(identifier, result):
            logger.warning("Scan result for '%s' was not stored; it will be recomputed next time.", identifier)

        self._set_state(identifier, PackageScanState.DONE)
        return [result]

    def _scan(
        self,
        path: Path,
        results_file: Path,
        details: ScannerDetails,
        identifier: Identifier | None = None,
    ) -> ScanResult:
        start_time, end_time = self.engine.invoke(path, results_file)
        if identifier is not None:
            self._set_state(identifier, PackageScanState.NORMALIZING)
        raw = self.engine.read_result(results_file)
        summary = self.engine.generate_summary(start_time, end_time, raw)
        return ScanResult(provenance=Provenance(), scanner=details, summary=summary, raw_result=raw)

    def _restore_raw_result(self, result: ScanResult, results_file: Path) -> None:
        """Write the stored raw document back when the local artifact is missing."""
        if result.raw_result is None or results_file.exists():
            return
        try:
            self.engine.write_result(results_file, result.raw_result)
        except OSError as exc:
            logger.warning("Could not restore raw result file %s: %s", results_file, exc)

    def _failure_result(self, details: ScannerDetails, message: str) -> ScanResult:
        now = utc_now()
        summary = ScanSummary(
            start_time=now,
            end_time=now,
            file_count=0,
            issues=(Issue(source=self.engine.name, message=message, severity=ISSUE_SEVERITY_ERROR),),
        )
        return ScanResult(provenance=Provenance(), scanner=details, summary=summary)

    def _set_state(self, identifier: Identifier, state: PackageScanState) -> None:
        logger.debug("'%s' -> %s", identifier, state)
        with self._states_lock:
            self._states[identifier] = state


def build_scan_record(
    results: Mapping[Package, list[ScanResult]],
    storage: ScanResultStorage,
) -> ScanRecord:
    """Assemble the scan record of a batch, ordered by identifier."""
    containers = tuple(
        ScanResultContainer(id=package.id, results=tuple(package_results))
        for package, package_results in sorted(results.items(), key=lambda item: item[0].id)
    )
    return ScanRecord(scan_results=containers, storage_stats=storage.stats())
