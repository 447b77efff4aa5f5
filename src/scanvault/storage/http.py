"""Result store backed by an HTTP artifact repository."""

from __future__ import annotations

import logging
import threading
from urllib.parse import quote

import requests

from scanvault.constants.cache import DEFAULT_HTTP_STORAGE_TIMEOUT, STORE_ENTRY_SUFFIX
from scanvault.exceptions import StoreError
from scanvault.model import Identifier, ScanResult
from scanvault.storage.base import ScanResultStorage
from scanvault.storage.documents import decode_document, encode_document

logger = logging.getLogger(__name__)


class HttpStorage(ScanResultStorage):
    """Store documents under ``<base_url>/<identifier path>/<key>.json`` via GET and PUT."""

    name = "HTTP storage"

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: int = DEFAULT_HTTP_STORAGE_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._write_lock = threading.Lock()

    def entry_url(self, identifier: Identifier, key: str) -> str:
        # Identifier paths are already percent-encoded; keep their separators.
        return f"{self.base_url}/{quote(identifier.to_path(), safe='/%')}/{key}{STORE_ENTRY_SUFFIX}"

    def _load(self, identifier: Identifier, key: str) -> tuple[ScanResult, ...]:
        url = self.entry_url(identifier, key)
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise StoreError(f"GET {url} failed: {exc}") from exc

        if response.status_code == 404:
            return ()
        if response.status_code != 200:
            raise StoreError(f"GET {url} returned HTTP {response.status_code}")

        try:
            raw = response.json()
        except ValueError as exc:
            raise StoreError(f"GET {url} returned invalid JSON: {exc}") from exc
        return decode_document(raw, key)

    def _append(self, identifier: Identifier, key: str, result: ScanResult) -> None:
        url = self.entry_url(identifier, key)
        with self._write_lock:
            try:
                existing = self._load(identifier, key)
            except StoreError as exc:
                logger.warning("Replacing unreadable stored entry at %s: %s", url, exc)
                existing = ()

            document = encode_document(identifier, key, existing, result)
            try:
                response = self.session.put(url, json=document, headers=self.headers, timeout=self.timeout)
            except requests.RequestException as exc:
                raise StoreError(f"PUT {url} failed: {exc}") from exc

        if response.status_code not in (200, 201, 204):
            raise StoreError(f"PUT {url} returned HTTP {response.status_code}")
