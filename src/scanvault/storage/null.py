"""Result store that never hits and never persists."""

from __future__ import annotations

from scanvault.model import Identifier, ScanResult
from scanvault.storage.base import ScanResultStorage


class NullStorage(ScanResultStorage):
    name = "no storage"

    def _load(self, identifier: Identifier, key: str) -> tuple[ScanResult, ...]:
        return ()

    def _append(self, identifier: Identifier, key: str, result: ScanResult) -> None:
        return None
