"""Tests for configuration loading and fingerprinting."""

from __future__ import annotations

from pathlib import Path

import pytest

from scanvault.config import (
    ScannerConfig,
    configuration_fingerprint,
    effective_scanner_options,
    load_config,
)
from scanvault.constants.config import DEFAULT_STATE_DIR
from scanvault.exceptions import ConfigError


def _write_config(tmp_path: Path, content: str) -> Path:
    config_path = tmp_path / "scanvault.yaml"
    config_path.write_text(content, encoding="utf-8")
    return config_path


def test_load_config_defaults_when_missing(tmp_path: Path) -> None:
    loaded = load_config(tmp_path)

    root = tmp_path.resolve()
    assert loaded.scanner == ScannerConfig()
    assert loaded.storage.backend == "local"
    assert loaded.storage.directory == root / DEFAULT_STATE_DIR / "scan-results"
    assert loaded.download_dir == root / DEFAULT_STATE_DIR / "downloads"
    assert loaded.max_workers == 1
    assert loaded.keep_downloads is False


def test_load_config_explicit_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config(tmp_path, tmp_path / "nope.yaml")


def test_load_config_reads_all_sections(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        "scanner:\n"
        "  name: spdx-tags\n"
        "  version: 1.0\n"
        "  version_requirement: '>=1.0,<2'\n"
        "  options:\n"
        "    max_bytes: 1024\n"
        "storage:\n"
        "  backend: http\n"
        "  url: https://cache.example.com/results/\n"
        "  headers:\n"
        "    Authorization: Bearer token\n"
        "download_dir: /tmp/scanvault-downloads\n"
        "keep_downloads: true\n"
        "max_workers: 4\n",
    )

    loaded = load_config(tmp_path, config_path)

    assert loaded.scanner.name == "spdx-tags"
    assert loaded.scanner.version == "1.0"
    assert loaded.scanner.version_requirement == ">=1.0,<2"
    assert loaded.scanner.options == {"max_bytes": 1024}
    assert loaded.storage.url == "https://cache.example.com/results"
    assert loaded.storage.headers == {"Authorization": "Bearer token"}
    assert loaded.download_dir == Path("/tmp/scanvault-downloads")
    assert loaded.keep_downloads is True
    assert loaded.max_workers == 4


def test_load_config_resolves_relative_directories_against_root(tmp_path: Path) -> None:
    _write_config(tmp_path, "storage:\n  directory: cache/results\n")

    loaded = load_config(tmp_path)

    assert loaded.storage.directory == tmp_path.resolve() / "cache" / "results"


@pytest.mark.parametrize(
    ("yaml_content", "expected_match"),
    [
        ("scanner:\n  name: licensee\n", "scanner.name"),
        ("scanner:\n  version_requirement: '>>1'\n", "scanner.version_requirement"),
        ("scanner:\n  processes: 0\n", "scanner.processes"),
        ("storage:\n  backend: s3\n", "storage.backend"),
        ("storage:\n  backend: http\n", "storage.url"),
        ("max_workers: true\n", "max_workers"),
        ("keep_downloads: maybe\n", "keep_downloads"),
        ("scanner: [scancode]\n", "scanner"),
        ("- just\n- a list\n", "YAML mapping"),
    ],
    ids=[
        "unknown_scanner",
        "bad_requirement",
        "zero_processes",
        "unknown_backend",
        "http_without_url",
        "bool_max_workers",
        "non_bool_keep_downloads",
        "scanner_not_mapping",
        "top_level_list",
    ],
)
def test_load_config_rejects_invalid_field_values(tmp_path: Path, yaml_content: str, expected_match: str) -> None:
    config_path = _write_config(tmp_path, yaml_content)

    with pytest.raises(ConfigError, match=expected_match):
        load_config(tmp_path, config_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "scanner: [unterminated\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(tmp_path, config_path)


def test_effective_scanner_options_drops_disabled_flags() -> None:
    options = effective_scanner_options(
        {"license": True, "copyright": True, "timeout": 300},
        {"copyright": False, "timeout": 120, "package": True},
    )

    assert options == {"license": True, "package": True, "timeout": 120}
    assert list(options) == ["license", "package", "timeout"]


def test_configuration_fingerprint_ignores_key_order() -> None:
    first = configuration_fingerprint({"license": True, "timeout": 300})
    second = configuration_fingerprint({"timeout": 300, "license": True})

    assert first == second


def test_configuration_fingerprint_changes_with_values() -> None:
    base = configuration_fingerprint({"license": True, "timeout": 300})

    assert configuration_fingerprint({"license": True, "timeout": 301}) != base
    assert configuration_fingerprint({"license": True}) != base
