"""Tests for config validation (error codes, messages, ordering)."""

from __future__ import annotations

from pathlib import Path

import pytest

from scanvault.config import validate_config_file
from scanvault.constants.validation import (
    CFG001,
    CFG002,
    CFG003,
    CFG004,
    CFG005,
    CFG006,
    CFG007,
    CFG008,
    CFG009,
)
from scanvault.exceptions.validation import ValidationError, format_errors, sort_errors


def _write_config(tmp_path: Path, content: str) -> Path:
    cfg = tmp_path / "scanvault.yaml"
    cfg.write_text(content, encoding="utf-8")
    return cfg


def test_validation_error_format_with_all_fields() -> None:
    err = ValidationError(
        code="CFG004",
        path="/repo/scanvault.yaml",
        field="max_worker",
        message="unknown key `max_worker`",
        hint="did you mean `max_workers`?",
    )
    assert err.format() == (
        "[CFG004] /repo/scanvault.yaml `max_worker`: unknown key `max_worker` (did you mean `max_workers`?)"
    )


def test_validation_error_format_without_optional_fields() -> None:
    err = ValidationError(
        code="CFG003",
        path="/repo/scanvault.yaml",
        field="",
        message="config must be a YAML mapping, got list",
    )
    assert err.format() == "[CFG003] /repo/scanvault.yaml config must be a YAML mapping, got list"


def test_sort_errors_is_deterministic() -> None:
    errs = [
        ValidationError(code="CFG005", path="/b.yaml", field="x", message="m"),
        ValidationError(code="CFG004", path="/a.yaml", field="y", message="m"),
        ValidationError(code="CFG004", path="/a.yaml", field="x", message="m"),
    ]
    sorted_errs = sort_errors(errs)
    assert [e.code for e in sorted_errs] == ["CFG004", "CFG004", "CFG005"]
    assert [e.field for e in sorted_errs] == ["x", "y", "x"]


def test_format_errors_combines_sorted_lines() -> None:
    errs = [
        ValidationError(code="CFG005", path="/b.yaml", field="x", message="bad type"),
        ValidationError(code="CFG004", path="/a.yaml", field="y", message="unknown"),
    ]
    lines = format_errors(errs).strip().split("\n")
    assert len(lines) == 2
    assert lines[0].startswith("[CFG004]")
    assert lines[1].startswith("[CFG005]")


def test_missing_default_config_is_valid(tmp_path: Path) -> None:
    assert validate_config_file(tmp_path) == []


def test_missing_explicit_config_reports_cfg001(tmp_path: Path) -> None:
    errors = validate_config_file(tmp_path, tmp_path / "missing.yaml", config_explicit=True)

    assert [e.code for e in errors] == [CFG001]


def test_empty_config_is_valid(tmp_path: Path) -> None:
    _write_config(tmp_path, "")

    assert validate_config_file(tmp_path) == []


def test_valid_config_has_no_errors(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        "scanner:\n"
        "  name: scancode\n"
        "  version_requirement: '>=32.0,<33'\n"
        "  options:\n"
        "    timeout: 120\n"
        "  processes: 2\n"
        "storage:\n"
        "  backend: local\n"
        "  directory: results\n"
        "max_workers: 3\n",
    )

    assert validate_config_file(tmp_path) == []


@pytest.mark.parametrize(
    ("yaml_content", "expected_code", "expected_field"),
    [
        ("scanner: [unterminated\n", CFG002, ""),
        ("- a\n- b\n", CFG003, ""),
        ("max_worker: 2\n", CFG004, "max_worker"),
        ("keep_downloads: yes please\n", CFG005, "keep_downloads"),
        ("scanner:\n  name: licensee\n", CFG006, "scanner.name"),
        ("max_workers: 0\n", CFG007, "max_workers"),
        ("scanner:\n  version_requirement: '~~1'\n", CFG008, "scanner.version_requirement"),
        ("storage: local\n", CFG009, "storage"),
        ("storage:\n  backend: http\n", CFG009, "storage.url"),
    ],
    ids=[
        "invalid_yaml",
        "not_mapping",
        "unknown_key",
        "bad_type",
        "bad_enum",
        "out_of_range",
        "bad_requirement",
        "storage_not_mapping",
        "http_requires_url",
    ],
)
def test_validation_codes(tmp_path: Path, yaml_content: str, expected_code: str, expected_field: str) -> None:
    _write_config(tmp_path, yaml_content)

    errors = validate_config_file(tmp_path)

    assert [(e.code, e.field) for e in errors] == [(expected_code, expected_field)]


def test_unknown_nested_key_suggests_close_match(tmp_path: Path) -> None:
    _write_config(tmp_path, "storage:\n  backnd: local\n")

    errors = validate_config_file(tmp_path)

    assert len(errors) == 1
    assert errors[0].field == "storage.backnd"
    assert errors[0].hint == "did you mean `backend`?"


def test_unknown_key_without_close_match_has_no_hint(tmp_path: Path) -> None:
    _write_config(tmp_path, "zzz_totally_unrelated: 1\n")

    errors = validate_config_file(tmp_path)

    assert errors[0].code == CFG004
    assert errors[0].hint == ""


def test_all_errors_are_collected_and_sorted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        "max_workers: -1\n"
        "download_dir: ''\n"
        "scanner:\n"
        "  name: nope\n"
        "  proceses: 2\n",
    )

    errors = validate_config_file(tmp_path)

    assert [e.code for e in errors] == [CFG004, CFG005, CFG006, CFG007]
    assert errors[0].hint == "did you mean `processes`?"
