"""Scanner configuration fingerprinting for cache keys."""

from __future__ import annotations

from collections.abc import Mapping

from scanvault.io import canonical_json
from scanvault.types import JsonValue


def effective_scanner_options(
    defaults: Mapping[str, JsonValue],
    overrides: Mapping[str, JsonValue] | None,
) -> dict[str, JsonValue]:
    """Merge configured option overrides onto engine defaults.

    An override of ``None`` or ``False`` removes a flag option entirely.
    """
    merged: dict[str, JsonValue] = dict(defaults)
    for key, value in (overrides or {}).items():
        if value is None or value is False:
            merged.pop(key, None)
        else:
            merged[key] = value
    return {key: merged[key] for key in sorted(merged)}


def configuration_fingerprint(options: Mapping[str, JsonValue]) -> str:
    """Return the canonical serialization of effective scanner options.

    Key order never matters. Values are compared as written, so equivalent
    but differently spelled options produce distinct fingerprints.
    """
    return canonical_json(dict(options))
