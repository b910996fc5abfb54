"""Keyed locks serializing booking operations.

Confirming an order reads availability and then writes reservations.  Two
confirmations for the same product must not interleave between those two
steps, or both could see the same free units and overbook.  Handlers hold
the lock of every product they reserve (and of the order they change)
for the whole unit of work.

Keys are acquired in sorted order, so two handlers needing overlapping key
sets cannot deadlock.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from rentals.domain.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)


def order_key(order_id: int) -> str:
    return f"order:{order_id}"


def product_key(product_id: str) -> str:
    return f"product:{product_id}"


def coupon_key(code: str) -> str:
    return f"coupon:{code.strip().upper()}"


class BookingLocks:
    """Process-wide registry of named, non-reentrant locks."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    @contextmanager
    def hold(self, keys: Iterable[str], timeout: float | None = None) -> Iterator[None]:
        """Hold every lock in *keys* for the duration of the block.

        With a *timeout* (seconds, shared across all keys) a lock that cannot
        be taken in time raises LockTimeoutError.  Nothing has been written
        at that point, so the caller may simply retry.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        acquired: list[threading.Lock] = []
        try:
            for key in sorted(set(keys)):
                lock = self._lock_for(key)
                if deadline is None:
                    lock.acquire()
                elif not lock.acquire(timeout=max(0.0, deadline - time.monotonic())):
                    logger.warning("Timed out waiting for lock %s", key)
                    raise LockTimeoutError(f"Timed out waiting for {key}; try again")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock
