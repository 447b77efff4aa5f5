"""Shared pytest fixtures: an in-process engine and downloader with call counters."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest

from scanvault.exceptions import DownloadError, ScanError
from scanvault.model import Identifier, LicenseFinding, Package, ScanSummary, TextLocation, utc_now
from scanvault.scanner.downloader import DownloadResult
from scanvault.scanner.engines import ScannerEngine
from scanvault.scanner.normalizer import normalize_summary
from scanvault.scanner.orchestrator import ScanPipeline
from scanvault.storage import LocalFileStorage, ScanResultStorage
from scanvault.types import JsonObject


class FakeEngine(ScannerEngine):
    """Library-only engine reporting MIT for every file named LICENSE."""

    name = "fake"
    default_options = {"depth": 1}

    def __init__(self, *, fail: bool = False, **kwargs: object) -> None:
        super().__init__(version="1.0.0", **kwargs)
        self.fail = fail
        self.invocations = 0
        self._lock = threading.Lock()

    def invoke(self, path: Path, results_file: Path) -> tuple[datetime, datetime]:
        with self._lock:
            self.invocations += 1
        if self.fail:
            raise ScanError("tool crashed")

        start_time = utc_now()
        files = sorted(item for item in ([path] if path.is_file() else path.rglob("*")) if item.is_file())
        raw: JsonObject = {
            "files": [
                {
                    "path": item.name if item == path else item.relative_to(path).as_posix(),
                    "license": "MIT" if item.name == "LICENSE" else None,
                }
                for item in files
            ]
        }
        self.write_result(results_file, raw)
        return start_time, utc_now()

    def generate_summary(self, start_time: datetime, end_time: datetime, raw: JsonObject) -> ScanSummary:
        files = raw["files"]
        findings = [
            LicenseFinding(license=entry["license"], location=TextLocation(entry["path"], 1, 1))
            for entry in files
            if entry["license"]
        ]
        return normalize_summary(
            start_time=start_time,
            end_time=end_time,
            file_count=len(files),
            license_findings=findings,
        )


class FakeDownloader:
    """Writes a LICENSE file as the package sources; fails for chosen identifiers."""

    def __init__(self, failing: tuple[Identifier, ...] = ()) -> None:
        self.failing = set(failing)
        self.calls: list[Identifier] = []
        self._lock = threading.Lock()

    def download(self, package: Package, target_dir: Path) -> DownloadResult:
        with self._lock:
            self.calls.append(package.id)
        if package.id in self.failing:
            raise DownloadError(f"no sources for {package.id}")

        source_dir = target_dir / "source"
        source_dir.mkdir(parents=True)
        (source_dir / "LICENSE").write_text("MIT License\n", encoding="utf-8")
        (source_dir / "index.js").write_text("module.exports = 1;\n", encoding="utf-8")
        return DownloadResult(download_directory=source_dir, date_time=utc_now())


def make_package(coordinates: str) -> Package:
    return Package(id=Identifier.from_coordinates(coordinates))


@pytest.fixture()
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def fake_downloader() -> FakeDownloader:
    return FakeDownloader()


@pytest.fixture()
def local_storage(tmp_path: Path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "store")


@pytest.fixture()
def package_factory() -> Callable[[str], Package]:
    return make_package


@pytest.fixture()
def pipeline_factory(tmp_path: Path) -> Callable[..., ScanPipeline]:
    """Build pipelines writing below ``tmp_path``."""

    def _build(
        engine: ScannerEngine,
        storage: ScanResultStorage,
        downloader: FakeDownloader,
        **kwargs: object,
    ) -> ScanPipeline:
        return ScanPipeline(
            engine,
            storage,
            downloader,  # type: ignore[arg-type]
            output_dir=tmp_path / "out",
            download_dir=tmp_path / "downloads",
            **kwargs,  # type: ignore[arg-type]
        )

    return _build


@pytest.fixture()
def failing_engine() -> FakeEngine:
    return FakeEngine(fail=True)


@pytest.fixture()
def downloader_factory() -> Callable[..., FakeDownloader]:
    def _build(*failing: str) -> FakeDownloader:
        return FakeDownloader(tuple(Identifier.from_coordinates(item) for item in failing))

    return _build
