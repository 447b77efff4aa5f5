"""Fetch package sources from version control or source artifacts."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from scanvault.constants.download import (
    DEFAULT_DOWNLOAD_TIMEOUT_SECONDS,
    DOWNLOAD_CHUNK_SIZE,
    GIT_PROTOCOL_PATTERN,
    GIT_TIMEOUT_SECONDS,
    GITHUB_SCP_PATTERN,
    SUPPORTED_VCS_TYPES,
    VCS_TYPE_GIT,
)
from scanvault.exceptions import DownloadError
from scanvault.io import extract_archive, file_digest, is_archive
from scanvault.model import Package, RemoteArtifact, VcsInfo, utc_now

logger = logging.getLogger(__name__)

_HASH_ALGORITHMS_BY_LENGTH = {32: "md5", 40: "sha1", 64: "sha256", 128: "sha512"}


@dataclass(frozen=True)
class DownloadResult:
    """Where sources were placed and exactly which snapshot they are."""

    download_directory: Path
    date_time: datetime
    source_artifact: RemoteArtifact | None = None
    vcs_info: VcsInfo | None = None
    original_vcs_info: VcsInfo | None = None


def normalize_vcs_url(url: str) -> str:
    """Turn common git URL spellings into something ``git clone`` accepts anonymously."""
    url = url.strip()
    if url.startswith("git+"):
        url = url[len("git+") :]

    github = GITHUB_SCP_PATTERN.match(url)
    if github:
        return f"https://github.com/{github.group('path')}"

    git_protocol = GIT_PROTOCOL_PATTERN.match(url)
    if git_protocol:
        return f"https://{git_protocol.group('rest')}"
    return url


class Downloader:
    """Download a package's sources, preferring VCS over the source artifact."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: int = DEFAULT_DOWNLOAD_TIMEOUT_SECONDS,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def download(self, package: Package, target_dir: Path) -> DownloadResult:
        """Place the sources of *package* below *target_dir*.

        Raises DownloadError carrying every attempt's message when nothing worked.
        """
        messages: list[str] = []

        if not package.vcs.is_empty:
            try:
                return self._download_vcs(package, target_dir / "vcs")
            except DownloadError as exc:
                logger.warning("VCS download of '%s' failed: %s", package.id, exc)
                messages.append(str(exc))

        if not package.source_artifact.is_empty:
            try:
                return self._download_artifact(package.source_artifact, target_dir / "source")
            except DownloadError as exc:
                logger.warning("Source artifact download of '%s' failed: %s", package.id, exc)
                messages.append(str(exc))

        if not messages:
            raise DownloadError(f"No source code location is known for '{package.id}'.")
        raise DownloadError(f"Could not download '{package.id}': " + "; ".join(messages))

    def _download_vcs(self, package: Package, checkout_dir: Path) -> DownloadResult:
        vcs = package.vcs
        vcs_type = vcs.type.lower() or (VCS_TYPE_GIT if vcs.url.endswith(".git") else "")
        if vcs_type not in SUPPORTED_VCS_TYPES:
            raise DownloadError(f"Unsupported VCS type '{vcs.type or 'unknown'}' for {vcs.url}")

        url = normalize_vcs_url(vcs.url)
        logger.info("Cloning %s for '%s'.", url, package.id)
        checkout_dir.mkdir(parents=True, exist_ok=True)
        _git(["clone", "--quiet", url, str(checkout_dir)], cwd=checkout_dir.parent)

        if vcs.revision:
            candidates = [vcs.revision]
        else:
            version = package.id.version
            candidates = [version, f"v{version}"] if version else []

        checked_out = False
        for candidate in candidates:
            try:
                _git(["checkout", "--quiet", candidate], cwd=checkout_dir)
            except DownloadError as exc:
                logger.debug("Revision '%s' of %s is not available: %s", candidate, url, exc)
                continue
            checked_out = True
            break

        if not checked_out:
            if vcs.revision:
                raise DownloadError(f"Revision '{vcs.revision}' does not exist in {url}")
            logger.warning(
                "No revision matches version '%s' of '%s'; using the default branch.",
                package.id.version,
                package.id,
            )

        commit = _git(["rev-parse", "HEAD"], cwd=checkout_dir).strip()
        download_directory = checkout_dir / vcs.path if vcs.path else checkout_dir
        if not download_directory.resolve().is_relative_to(checkout_dir.resolve()):
            raise DownloadError(f"Path '{vcs.path}' points outside the checkout of {url}")
        if not download_directory.is_dir():
            raise DownloadError(f"Path '{vcs.path}' does not exist in {url}")

        return DownloadResult(
            download_directory=download_directory,
            date_time=utc_now(),
            vcs_info=replace(vcs, type=VCS_TYPE_GIT, url=url, revision=commit),
            original_vcs_info=vcs,
        )

    def _download_artifact(self, artifact: RemoteArtifact, source_dir: Path) -> DownloadResult:
        file_name = unquote(Path(urlparse(artifact.url).path).name) or "source"
        source_dir.mkdir(parents=True, exist_ok=True)
        staging = source_dir.parent / file_name

        logger.info("Downloading source artifact %s.", artifact.url)
        try:
            with self.session.get(artifact.url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with staging.open("wb") as handle:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        handle.write(chunk)
        except requests.RequestException as exc:
            raise DownloadError(f"Could not fetch {artifact.url}: {exc}") from exc

        if artifact.hash:
            _verify_hash(staging, artifact)

        if is_archive(staging):
            try:
                extract_archive(staging, source_dir)
            except (OSError, ValueError) as exc:
                raise DownloadError(f"Could not unpack {file_name}: {exc}") from exc
            staging.unlink()
        else:
            staging.replace(source_dir / file_name)

        return DownloadResult(download_directory=source_dir, date_time=utc_now(), source_artifact=artifact)


def _verify_hash(path: Path, artifact: RemoteArtifact) -> None:
    algorithm = artifact.hash_algorithm or _HASH_ALGORITHMS_BY_LENGTH.get(len(artifact.hash), "")
    if not algorithm:
        raise DownloadError(f"Cannot tell the hash algorithm of {artifact.url}")
    try:
        actual = file_digest(path, algorithm)
    except ValueError as exc:
        raise DownloadError(f"Unsupported hash algorithm '{algorithm}' for {artifact.url}") from exc
    if actual.lower() != artifact.hash.lower():
        raise DownloadError(f"{algorithm} of {artifact.url} is {actual}, expected {artifact.hash}")


def _git(args: list[str], *, cwd: Path) -> str:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except subprocess.CalledProcessError as exc:
        raise DownloadError(f"git {args[0]} failed: {(exc.stderr or '').strip()}") from exc
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise DownloadError(f"git {args[0]} failed: {exc}") from exc
    return completed.stdout
