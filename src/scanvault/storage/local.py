"""Result store backed by JSON documents on the local file system."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from scanvault.constants.cache import STORE_ENTRY_SUFFIX, STORE_TEMP_PREFIX, STORE_TEMP_SUFFIX
from scanvault.exceptions import StoreError
from scanvault.io import load_json_file, write_json_atomic
from scanvault.model import Identifier, ScanResult
from scanvault.storage.base import ScanResultStorage
from scanvault.storage.documents import decode_document, encode_document

logger = logging.getLogger(__name__)


class LocalFileStorage(ScanResultStorage):
    """Store one document per cache key under ``<root>/<identifier path>/``."""

    name = "local file storage"

    def __init__(self, root: Path) -> None:
        super().__init__()
        self.root = root
        self._write_lock = threading.Lock()

    def entry_path(self, identifier: Identifier, key: str) -> Path:
        return self.root / identifier.to_path() / f"{key}{STORE_ENTRY_SUFFIX}"

    def _load(self, identifier: Identifier, key: str) -> tuple[ScanResult, ...]:
        path = self.entry_path(identifier, key)
        if not path.is_file():
            return ()
        try:
            raw = load_json_file(path)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StoreError(f"cannot read {path}: {exc}") from exc
        return decode_document(raw, key)

    def _append(self, identifier: Identifier, key: str, result: ScanResult) -> None:
        path = self.entry_path(identifier, key)
        with self._write_lock:
            try:
                existing = self._load(identifier, key)
            except StoreError as exc:
                logger.warning("Replacing unreadable stored entry %s: %s", path, exc)
                existing = ()

            document = encode_document(identifier, key, existing, result)
            try:
                write_json_atomic(
                    path=path,
                    payload=document,
                    temp_prefix=STORE_TEMP_PREFIX,
                    temp_suffix=STORE_TEMP_SUFFIX,
                )
            except OSError as exc:
                raise StoreError(f"cannot write {path}: {exc}") from exc
