"""Tests for the built-in SPDX tag engine."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from scanvault.exceptions import ScanError
from scanvault.model import utc_now
from scanvault.scanner.engines import SpdxTagEngine


@pytest.fixture()
def source_tree(tmp_path: Path) -> Path:
    root = tmp_path / "src"
    (root / "lib").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "main.c").write_text("// SPDX-License-Identifier: MIT\nint main(void) {}\n", encoding="utf-8")
    (root / "lib" / "util.py").write_text(
        "#!/usr/bin/env python\n# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-only\n",
        encoding="utf-8",
    )
    (root / "README").write_text("no tags here\n", encoding="utf-8")
    (root / ".git" / "config").write_text("SPDX-License-Identifier: BSD-3-Clause\n", encoding="utf-8")
    return root


def test_engine_is_library_only() -> None:
    engine = SpdxTagEngine()

    assert engine.command() == ""
    assert engine.details().name == "spdx-tags"


def test_invoke_writes_raw_result_and_summary_reports_tags(tmp_path: Path, source_tree: Path) -> None:
    engine = SpdxTagEngine()
    results_file = tmp_path / "out" / "scan-results_spdx-tags.json"

    start, end = engine.invoke(source_tree, results_file)
    raw = json.loads(results_file.read_text(encoding="utf-8"))
    summary = engine.generate_summary(start, end, raw)

    assert raw["files_count"] == 3
    assert summary.file_count == 3
    assert [(f.license, f.location.path, f.location.start_line) for f in summary.license_findings] == [
        ("Apache-2.0 OR GPL-2.0-only", "lib/util.py", 2),
        ("MIT", "main.c", 1),
    ]
    assert summary.issues == ()


def test_single_file_is_scanned(tmp_path: Path, source_tree: Path) -> None:
    engine = SpdxTagEngine()
    results_file = tmp_path / "single.json"

    start, end = engine.invoke(source_tree / "main.c", results_file)
    summary = engine.generate_summary(start, end, engine.read_result(results_file))

    assert summary.licenses == ("MIT",)
    assert summary.license_findings[0].location.path == "main.c"


def test_max_bytes_limits_how_much_of_a_file_is_read(tmp_path: Path) -> None:
    root = tmp_path / "src"
    root.mkdir()
    (root / "late.txt").write_text("x" * 100 + "\nSPDX-License-Identifier: MIT\n", encoding="utf-8")
    engine = SpdxTagEngine(options={"max_bytes": 50})

    start, end = engine.invoke(root, tmp_path / "r.json")
    summary = engine.generate_summary(start, end, engine.read_result(tmp_path / "r.json"))

    assert summary.license_findings == ()
    assert engine.configuration() != SpdxTagEngine().configuration()


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlink_cycles_are_walked_once(tmp_path: Path, source_tree: Path) -> None:
    (source_tree / "lib" / "loop").symlink_to(source_tree, target_is_directory=True)
    engine = SpdxTagEngine()

    start, end = engine.invoke(source_tree, tmp_path / "r.json")
    summary = engine.generate_summary(start, end, engine.read_result(tmp_path / "r.json"))

    assert summary.file_count == 3


def test_missing_path_is_scan_error(tmp_path: Path) -> None:
    with pytest.raises(ScanError, match="missing"):
        SpdxTagEngine().invoke(tmp_path / "nope", tmp_path / "r.json")


def test_malformed_raw_result_is_scan_error() -> None:
    engine = SpdxTagEngine()

    with pytest.raises(ScanError):
        engine.generate_summary(utc_now(), utc_now(), {"files": []})
