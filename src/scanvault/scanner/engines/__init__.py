"""Scanner engines and the factory selecting one from config."""

from __future__ import annotations

from typing import Any

from scanvault.config.model import ScannerConfig
from scanvault.constants.scanners import SCANNER_SCANCODE, SCANNER_SPDX_TAGS, VALID_SCANNERS
from scanvault.exceptions import ConfigError

from .base import ScannerEngine
from .scancode import ScanCodeEngine
from .spdx_tags import SpdxTagEngine

__all__ = ["ScanCodeEngine", "ScannerEngine", "SpdxTagEngine", "create_engine"]


def create_engine(config: ScannerConfig) -> ScannerEngine:
    """Build the engine named by ``scanner.name`` with its configured options."""
    kwargs: dict[str, Any] = {"version_requirement": config.version_requirement, "options": config.options}
    if config.version is not None:
        kwargs["version"] = config.version

    if config.name == SCANNER_SCANCODE:
        return ScanCodeEngine(processes=config.processes, **kwargs)
    if config.name == SCANNER_SPDX_TAGS:
        return SpdxTagEngine(**kwargs)
    raise ConfigError(f"Unknown scanner {config.name!r}; expected one of {sorted(VALID_SCANNERS)}")
