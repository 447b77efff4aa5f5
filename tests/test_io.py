"""Tests for JSON, hashing and archive IO helpers."""

from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from scanvault.io import canonical_json, extract_archive, file_digest, is_archive, write_json_atomic


def test_write_json_atomic_cleans_temp_file_on_error(tmp_path: Path) -> None:
    out_path = tmp_path / "report.json"
    temp_prefix = ".tmp-"
    temp_suffix = ".json"

    with pytest.raises(TypeError):
        write_json_atomic(
            path=out_path,
            payload={"bad": object()},
            temp_prefix=temp_prefix,
            temp_suffix=temp_suffix,
        )

    leftovers = [
        item for item in tmp_path.iterdir() if item.name.startswith(temp_prefix) and item.name.endswith(temp_suffix)
    ]
    assert not leftovers
    assert not out_path.exists()


def test_canonical_json_ignores_key_order() -> None:
    first = canonical_json({"b": 1, "a": {"y": [1, 2], "x": "é"}})
    second = canonical_json({"a": {"x": "é", "y": [1, 2]}, "b": 1})

    assert first == second
    assert first == '{"a":{"x":"é","y":[1,2]},"b":1}'


def test_file_digest_supports_named_algorithms(tmp_path: Path) -> None:
    payload = tmp_path / "payload.txt"
    payload.write_bytes(b"abc")

    assert file_digest(payload, "sha1") == "a9993e364706816aba3e25717850c26c9cd0d89d"
    with pytest.raises(ValueError):
        file_digest(payload, "not-a-hash")


def test_extract_zip_archive(tmp_path: Path) -> None:
    archive = tmp_path / "pkg.zip"
    with zipfile.ZipFile(archive, "w") as bundle:
        bundle.writestr("pkg/LICENSE", "MIT License\n")
        bundle.writestr("pkg/src/index.js", "module.exports = 1;\n")

    target = tmp_path / "out"
    extract_archive(archive, target)

    assert is_archive(archive)
    assert (target / "pkg" / "LICENSE").read_text(encoding="utf-8") == "MIT License\n"
    assert (target / "pkg" / "src" / "index.js").is_file()


def test_extract_tar_archive(tmp_path: Path) -> None:
    archive = tmp_path / "pkg.tar.gz"
    data = b"Apache License\n"
    with tarfile.open(archive, "w:gz") as bundle:
        info = tarfile.TarInfo("pkg/LICENSE")
        info.size = len(data)
        bundle.addfile(info, io.BytesIO(data))

    target = tmp_path / "out"
    extract_archive(archive, target)

    assert (target / "pkg" / "LICENSE").read_bytes() == data


def test_extract_zip_rejects_escaping_member(tmp_path: Path) -> None:
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as bundle:
        bundle.writestr("../escaped.txt", "boom")

    with pytest.raises(ValueError, match="escapes target directory"):
        extract_archive(archive, tmp_path / "out")
    assert not (tmp_path / "escaped.txt").exists()


def test_plain_file_is_not_an_archive(tmp_path: Path) -> None:
    plain = tmp_path / "index.js"
    plain.write_text("module.exports = 1;\n", encoding="utf-8")

    assert not is_archive(plain)
    with pytest.raises(ValueError, match="unsupported archive format"):
        extract_archive(plain, tmp_path / "out")


@pytest.mark.parametrize("name", ["broken.tar.gz", "broken.zip"])
def test_corrupt_archive_raises_value_error(tmp_path: Path, name: str) -> None:
    archive = tmp_path / name
    archive.write_bytes(b"<html>503 Service Unavailable</html>")

    with pytest.raises(ValueError, match="corrupt"):
        extract_archive(archive, tmp_path / "out")
