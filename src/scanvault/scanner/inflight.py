"""Deduplication of concurrent computations sharing a cache key."""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Generic, TypeVar

T = TypeVar("T")


class InFlightRegistry(Generic[T]):
    """Run at most one computation per key at a time.

    Callers arriving while a computation for their key is running wait for it
    and observe the same value or exception. Completed entries are dropped, so
    a later call for the same key computes again.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: dict[str, Future[T]] = {}

    def run(self, key: str, compute: Callable[[], T]) -> T:
        with self._lock:
            future = self._pending.get(key)
            owner = future is None
            if future is None:
                future = Future()
                self._pending[key] = future

        if not owner:
            return future.result()

        try:
            value = compute()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(value)
            return value
        finally:
            with self._lock:
                self._pending.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
