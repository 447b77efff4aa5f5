"""Config file validation for scanvault runs."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import yaml
from packaging.specifiers import InvalidSpecifier, SpecifierSet

from scanvault.constants.cache import STORAGE_BACKEND_HTTP, VALID_STORAGE_BACKENDS
from scanvault.constants.config import CONFIG_FILENAME
from scanvault.constants.scanners import VALID_SCANNERS
from scanvault.constants.validation import (
    ALLOWED_CONFIG_KEYS,
    ALLOWED_SCANNER_KEYS,
    ALLOWED_STORAGE_KEYS,
    CFG001,
    CFG002,
    CFG003,
    CFG004,
    CFG005,
    CFG006,
    CFG007,
    CFG008,
    CFG009,
    PATH_KEYS,
    POSITIVE_INT_KEYS,
)
from scanvault.exceptions.validation import ValidationError, sort_errors


def validate_config_file(
    root: Path,
    config_path: Path | None = None,
    *,
    config_explicit: bool = False,
) -> list[ValidationError]:
    """Validate a scanvault.yaml file and return all validation errors.

    This is the collect-all entry point used by ``scanvault validate-config``
    and as a preflight by the scan commands. It never raises; all problems
    are returned as :class:`ValidationError` instances.
    """
    errors: list[ValidationError] = []
    root = root.resolve()
    path = config_path.resolve() if config_path else (root / CONFIG_FILENAME)
    path_str = str(path)

    if not path.exists():
        if config_explicit:
            errors.append(
                ValidationError(
                    code=CFG001,
                    path=path_str,
                    field="",
                    message=f"config file not found: {path}",
                )
            )
        return errors

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        errors.append(ValidationError(code=CFG002, path=path_str, field="", message=f"invalid YAML: {exc}"))
        return errors

    if raw is None:
        return errors

    if not isinstance(raw, dict):
        errors.append(
            ValidationError(
                code=CFG003,
                path=path_str,
                field="",
                message=f"config must be a YAML mapping, got {type(raw).__name__}",
            )
        )
        return errors

    _check_unknown_keys(raw, ALLOWED_CONFIG_KEYS, "", path_str, errors)

    for key in PATH_KEYS:
        if key in raw and (not isinstance(raw[key], str) or not raw[key].strip()):
            errors.append(_type_error(path_str, key, "expected a non-empty path string"))

    for key in POSITIVE_INT_KEYS:
        if key in raw:
            _check_positive_int(raw[key], key, path_str, errors)

    if "keep_downloads" in raw and not isinstance(raw["keep_downloads"], bool):
        errors.append(_type_error(path_str, "keep_downloads", "expected a boolean"))

    _validate_scanner_block(raw, path_str, errors)
    _validate_storage_block(raw, path_str, errors)

    return sort_errors(errors)


def _validate_scanner_block(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    """Validate the ``scanner`` nested mapping."""
    block = _nested_block(raw, "scanner", path_str, errors)
    if block is None:
        return

    _check_unknown_keys(block, ALLOWED_SCANNER_KEYS, "scanner.", path_str, errors)

    if "name" in block and (not isinstance(block["name"], str) or block["name"] not in VALID_SCANNERS):
        errors.append(
            ValidationError(
                code=CFG006,
                path=path_str,
                field="scanner.name",
                message="invalid value for `scanner.name`",
                hint=f"expected one of: {', '.join(sorted(VALID_SCANNERS))}; got: {block['name']!r}",
            )
        )

    requirement = block.get("version_requirement")
    if requirement is not None:
        try:
            SpecifierSet(str(requirement))
        except InvalidSpecifier:
            errors.append(
                ValidationError(
                    code=CFG008,
                    path=path_str,
                    field="scanner.version_requirement",
                    message=f"invalid version requirement {requirement!r}",
                    hint="use a PEP 440 specifier such as '>=32.0,<33'",
                )
            )

    if "options" in block and block["options"] is not None and not isinstance(block["options"], dict):
        errors.append(_type_error(path_str, "scanner.options", "expected a mapping"))

    if "processes" in block and block["processes"] is not None:
        _check_positive_int(block["processes"], "scanner.processes", path_str, errors)


def _validate_storage_block(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    """Validate the ``storage`` nested mapping."""
    block = _nested_block(raw, "storage", path_str, errors)
    if block is None:
        return

    _check_unknown_keys(block, ALLOWED_STORAGE_KEYS, "storage.", path_str, errors)

    backend = block.get("backend")
    if backend is not None and (not isinstance(backend, str) or backend not in VALID_STORAGE_BACKENDS):
        errors.append(
            ValidationError(
                code=CFG006,
                path=path_str,
                field="storage.backend",
                message="invalid value for `storage.backend`",
                hint=f"expected one of: {', '.join(sorted(VALID_STORAGE_BACKENDS))}; got: {backend!r}",
            )
        )
    if backend == STORAGE_BACKEND_HTTP and not block.get("url"):
        errors.append(
            ValidationError(
                code=CFG009,
                path=path_str,
                field="storage.url",
                message="`storage.url` is required when `storage.backend` is http",
            )
        )

    if "timeout" in block:
        _check_positive_int(block["timeout"], "storage.timeout", path_str, errors)

    headers = block.get("headers")
    if headers is not None and (
        not isinstance(headers, dict) or not all(isinstance(v, str) for v in headers.values())
    ):
        errors.append(_type_error(path_str, "storage.headers", "expected a mapping of strings"))


def _nested_block(
    raw: dict[str, Any],
    key: str,
    path_str: str,
    errors: list[ValidationError],
) -> dict[str, Any] | None:
    if key not in raw or raw[key] is None:
        return None
    block = raw[key]
    if not isinstance(block, dict):
        errors.append(
            ValidationError(
                code=CFG009,
                path=path_str,
                field=key,
                message=f"`{key}` must be a mapping",
                hint=f"got {type(block).__name__}",
            )
        )
        return None
    return block


def _check_unknown_keys(
    block: dict[str, Any],
    allowed: frozenset[str],
    prefix: str,
    path_str: str,
    errors: list[ValidationError],
) -> None:
    for key in sorted(block.keys(), key=str):
        if key not in allowed:
            errors.append(
                ValidationError(
                    code=CFG004,
                    path=path_str,
                    field=f"{prefix}{key}",
                    message=f"unknown key `{prefix}{key}`",
                    hint=_suggest_key(str(key), allowed),
                )
            )


def _check_positive_int(value: Any, field_name: str, path_str: str, errors: list[ValidationError]) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        errors.append(_type_error(path_str, field_name, "expected a positive integer"))
    elif value <= 0:
        errors.append(
            ValidationError(
                code=CFG007,
                path=path_str,
                field=field_name,
                message=f"`{field_name}` must be a positive integer, got {value}",
            )
        )


def _type_error(path_str: str, field_name: str, hint: str) -> ValidationError:
    return ValidationError(
        code=CFG005,
        path=path_str,
        field=field_name,
        message=f"invalid type for `{field_name}`",
        hint=hint,
    )


def _suggest_key(key: str, allowed: frozenset[str]) -> str:
    """Return a did-you-mean hint for an unknown key, or an empty string."""
    matches = difflib.get_close_matches(key, sorted(allowed), n=1, cutoff=0.6)
    if matches:
        return f"did you mean `{matches[0]}`?"
    return ""
