"""Tests for source downloads from artifacts and git."""

from __future__ import annotations

import hashlib
import io
import shutil
import subprocess
import zipfile
from collections.abc import Iterator
from pathlib import Path

import pytest
import requests

from scanvault.exceptions import DownloadError
from scanvault.model import Identifier, Package, RemoteArtifact, VcsInfo
from scanvault.scanner.downloader import Downloader, normalize_vcs_url


class _StreamResponse:
    def __init__(self, body: bytes, status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code

    def __enter__(self) -> _StreamResponse:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def iter_content(self, chunk_size: int) -> Iterator[bytes]:
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start : start + chunk_size]


class _Session:
    def __init__(self, files: dict[str, bytes]) -> None:
        self.files = files

    def get(self, url: str, *, stream: bool, timeout: int) -> _StreamResponse:
        if url not in self.files:
            return _StreamResponse(b"", 404)
        return _StreamResponse(self.files[url])


def _zip_bytes(members: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buffer.getvalue()


ARCHIVE_URL = "https://registry.example.com/leftpad/-/leftpad-1.0.0.zip"
ARCHIVE = _zip_bytes({"package/LICENSE": "MIT License\n", "package/index.js": "module.exports = 1;\n"})


def _package(**kwargs: object) -> Package:
    return Package(id=Identifier("npm", "", "leftpad", "1.0.0"), **kwargs)  # type: ignore[arg-type]


def test_source_artifact_is_fetched_verified_and_unpacked(tmp_path: Path) -> None:
    artifact = RemoteArtifact(ARCHIVE_URL, hashlib.sha1(ARCHIVE).hexdigest(), "sha1")
    downloader = Downloader(session=_Session({ARCHIVE_URL: ARCHIVE}))

    result = downloader.download(_package(source_artifact=artifact), tmp_path)

    assert (result.download_directory / "package" / "LICENSE").read_text(encoding="utf-8") == "MIT License\n"
    assert result.source_artifact == artifact
    assert result.vcs_info is None
    assert not (tmp_path / "leftpad-1.0.0.zip").exists()


def test_hash_algorithm_is_inferred_from_length(tmp_path: Path) -> None:
    artifact = RemoteArtifact(ARCHIVE_URL, hashlib.sha256(ARCHIVE).hexdigest(), "")
    downloader = Downloader(session=_Session({ARCHIVE_URL: ARCHIVE}))

    assert downloader.download(_package(source_artifact=artifact), tmp_path).source_artifact == artifact


def test_hash_mismatch_is_download_error(tmp_path: Path) -> None:
    artifact = RemoteArtifact(ARCHIVE_URL, "0" * 40, "sha1")
    downloader = Downloader(session=_Session({ARCHIVE_URL: ARCHIVE}))

    with pytest.raises(DownloadError, match="expected 0000"):
        downloader.download(_package(source_artifact=artifact), tmp_path)


def test_plain_files_are_kept_as_is(tmp_path: Path) -> None:
    url = "https://example.com/files/leftpad.js"
    downloader = Downloader(session=_Session({url: b"// SPDX-License-Identifier: MIT\n"}))

    result = downloader.download(_package(source_artifact=RemoteArtifact(url)), tmp_path)

    assert (result.download_directory / "leftpad.js").is_file()


def test_archive_members_escaping_target_are_rejected(tmp_path: Path) -> None:
    evil = _zip_bytes({"../evil.txt": "boom"})
    downloader = Downloader(session=_Session({ARCHIVE_URL: evil}))

    with pytest.raises(DownloadError, match="escapes"):
        downloader.download(_package(source_artifact=RemoteArtifact(ARCHIVE_URL)), tmp_path / "scratch")
    assert not (tmp_path / "evil.txt").exists()


def test_corrupt_archive_is_download_error(tmp_path: Path) -> None:
    downloader = Downloader(session=_Session({ARCHIVE_URL: b"<html>not found</html>"}))

    with pytest.raises(DownloadError, match="Could not unpack"):
        downloader.download(_package(source_artifact=RemoteArtifact(ARCHIVE_URL)), tmp_path / "scratch")


def test_no_location_is_download_error(tmp_path: Path) -> None:
    with pytest.raises(DownloadError, match="No source code location"):
        Downloader(session=_Session({})).download(_package(), tmp_path)


def test_all_failures_are_collected(tmp_path: Path) -> None:
    package = _package(
        vcs=VcsInfo(type="Mercurial", url="https://hg.example.com/leftpad"),
        source_artifact=RemoteArtifact("https://example.com/missing.zip"),
    )

    with pytest.raises(DownloadError) as excinfo:
        Downloader(session=_Session({})).download(package, tmp_path)

    message = str(excinfo.value)
    assert "Unsupported VCS type 'Mercurial'" in message
    assert "missing.zip" in message


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("git+https://github.com/a/b.git", "https://github.com/a/b.git"),
        ("git@github.com:a/b.git", "https://github.com/a/b.git"),
        ("ssh://git@github.com/a/b.git", "https://github.com/a/b.git"),
        ("git://github.com/a/b.git", "https://github.com/a/b.git"),
        ("https://gitlab.com/a/b.git", "https://gitlab.com/a/b.git"),
    ],
)
def test_normalize_vcs_url(url: str, expected: str) -> None:
    assert normalize_vcs_url(url) == expected


def _git(*args: str, cwd: Path) -> str:
    completed = subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return completed.stdout.strip()


@pytest.fixture()
def git_repo(tmp_path: Path) -> Path:
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo = tmp_path / "origin"
    repo.mkdir()
    _git("init", "--quiet", cwd=repo)
    (repo / "LICENSE").write_text("MIT License\n", encoding="utf-8")
    _git("add", "LICENSE", cwd=repo)
    _git("commit", "--quiet", "-m", "first", cwd=repo)
    _git("tag", "v1.0.0", cwd=repo)
    (repo / "LICENSE").write_text("Apache License\n", encoding="utf-8")
    _git("commit", "--quiet", "-am", "second", cwd=repo)
    return repo


def test_git_checkout_uses_version_tag_and_records_commit(tmp_path: Path, git_repo: Path) -> None:
    tagged = _git("rev-parse", "v1.0.0^{commit}", cwd=git_repo)
    package = _package(vcs=VcsInfo(type="git", url=str(git_repo)))

    result = Downloader(session=_Session({})).download(package, tmp_path / "scratch")

    assert (result.download_directory / "LICENSE").read_text(encoding="utf-8") == "MIT License\n"
    assert result.vcs_info is not None
    assert result.vcs_info.revision == tagged
    assert result.original_vcs_info == package.vcs


def test_git_unknown_revision_falls_back_to_artifact(tmp_path: Path, git_repo: Path) -> None:
    package = _package(
        vcs=VcsInfo(type="git", url=str(git_repo), revision="does-not-exist"),
        source_artifact=RemoteArtifact(ARCHIVE_URL),
    )

    result = Downloader(session=_Session({ARCHIVE_URL: ARCHIVE})).download(package, tmp_path / "scratch")

    assert result.source_artifact == RemoteArtifact(ARCHIVE_URL)
    assert result.vcs_info is None


def test_git_path_outside_checkout_is_rejected(tmp_path: Path, git_repo: Path) -> None:
    package = _package(vcs=VcsInfo(type="git", url=str(git_repo), path="../.."))

    with pytest.raises(DownloadError, match="points outside the checkout"):
        Downloader(session=_Session({})).download(package, tmp_path / "scratch")
