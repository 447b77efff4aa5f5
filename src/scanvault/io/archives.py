"""Safe unpacking of zip and tar archives."""

from __future__ import annotations

import shutil
import tarfile
import zipfile
from pathlib import Path

from scanvault.constants.download import ARCHIVE_TAR_SUFFIXES, ARCHIVE_ZIP_SUFFIXES


def is_archive(path: Path) -> bool:
    """Return True when the file name carries a supported archive suffix."""
    name = path.name.lower()
    return name.endswith(ARCHIVE_ZIP_SUFFIXES) or name.endswith(ARCHIVE_TAR_SUFFIXES)


def extract_archive(archive: Path, target_dir: Path) -> None:
    """Unpack *archive* into *target_dir*.

    Raises ValueError when the archive is corrupt, a member would land outside
    *target_dir*, or the archive format is not supported.
    """
    name = archive.name.lower()
    target_dir.mkdir(parents=True, exist_ok=True)
    if name.endswith(ARCHIVE_ZIP_SUFFIXES):
        try:
            _extract_zip(archive, target_dir)
        except zipfile.BadZipFile as exc:
            raise ValueError(f"corrupt zip archive {archive.name}: {exc}") from exc
    elif name.endswith(ARCHIVE_TAR_SUFFIXES):
        try:
            _extract_tar(archive, target_dir)
        except tarfile.TarError as exc:
            raise ValueError(f"corrupt or unsafe tar archive {archive.name}: {exc}") from exc
    else:
        raise ValueError(f"unsupported archive format: {archive.name}")


def _is_within_directory(base_dir: Path, target: Path) -> bool:
    return target.resolve().is_relative_to(base_dir.resolve())


def _extract_zip(archive: Path, target_dir: Path) -> None:
    with zipfile.ZipFile(archive) as handle:
        members = handle.infolist()
        for member in members:
            if not _is_within_directory(target_dir, target_dir / member.filename):
                raise ValueError(f"archive member escapes target directory: {member.filename}")

        for member in members:
            out_path = target_dir / member.filename
            if member.is_dir():
                out_path.mkdir(parents=True, exist_ok=True)
                continue
            out_path.parent.mkdir(parents=True, exist_ok=True)
            with handle.open(member) as src, out_path.open("wb") as dst:
                shutil.copyfileobj(src, dst)

            mode = (member.external_attr >> 16) & 0o777
            if mode:
                out_path.chmod(mode)


def _extract_tar(archive: Path, target_dir: Path) -> None:
    with tarfile.open(archive) as handle:
        for member in handle.getmembers():
            if not _is_within_directory(target_dir, target_dir / member.name):
                raise ValueError(f"archive member escapes target directory: {member.name}")
        handle.extractall(target_dir, filter="data")
