"""Result store contract shared by all backends."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

from scanvault.exceptions import StoreError
from scanvault.model import AccessStatistics, Identifier, ScannerDetails, ScanResult
from scanvault.storage.keys import derive_cache_key

logger = logging.getLogger(__name__)


class ScanResultStorage(ABC):
    """Durable key-value store for scan results.

    Backends implement ``_load`` and ``_append``; this base class applies the
    lookup and publication policy and keeps access statistics. Reads and
    writes are safe to call from concurrent threads.
    """

    name: str = "storage"

    def __init__(self) -> None:
        self._stats_lock = threading.Lock()
        self._num_reads = 0
        self._num_hits = 0
        self._num_writes = 0
        self._num_write_failures = 0

    def read(self, identifier: Identifier, details: ScannerDetails) -> tuple[ScanResult, ...]:
        """Return stored results for the identifier and scanner, empty on a miss."""
        key = derive_cache_key(identifier, details)
        try:
            stored = self._load(identifier, key)
        except StoreError as exc:
            logger.warning("Could not read stored results for '%s' from %s: %s", identifier, self.name, exc)
            stored = ()

        results = tuple(result for result in stored if result.scanner == details)
        with self._stats_lock:
            self._num_reads += 1
            if results:
                self._num_hits += 1
        return results

    def write(self, identifier: Identifier, result: ScanResult) -> bool:
        """Publish a complete result under its key; return False on failure."""
        key = derive_cache_key(identifier, result.scanner)
        try:
            ensure_complete(result)
            self._append(identifier, key, result)
        except StoreError as exc:
            logger.warning("Could not store scan result for '%s' in %s: %s", identifier, self.name, exc)
            with self._stats_lock:
                self._num_write_failures += 1
            return False

        with self._stats_lock:
            self._num_writes += 1
        logger.debug("Stored scan result for '%s' in %s under key %s.", identifier, self.name, key)
        return True

    def stats(self) -> AccessStatistics:
        with self._stats_lock:
            return AccessStatistics(
                num_reads=self._num_reads,
                num_hits=self._num_hits,
                num_writes=self._num_writes,
                num_write_failures=self._num_write_failures,
            )

    @abstractmethod
    def _load(self, identifier: Identifier, key: str) -> tuple[ScanResult, ...]:
        """Return every result stored under *key*; raise StoreError on backend failure."""

    @abstractmethod
    def _append(self, identifier: Identifier, key: str, result: ScanResult) -> None:
        """Add *result* under *key* without touching other keys; raise StoreError on failure."""


def ensure_complete(result: ScanResult) -> None:
    """Raise StoreError when a result is not fit for publication."""
    if not result.scanner.name or not result.scanner.version:
        raise StoreError("scan result has incomplete scanner details")
    if result.summary.end_time < result.summary.start_time:
        raise StoreError("scan result ends before it starts")
    if result.summary.file_count < 0:
        raise StoreError("scan result has a negative file count")
