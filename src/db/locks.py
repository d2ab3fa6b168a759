"""Per-key locks, so concurrent callbacks on the same match are serialized while different matches never contend."""

import threading
from contextlib import contextmanager
from typing import Iterator


class KeyedLocks:
    """Hands out one lock per key. Locks are reference counted and dropped once nobody holds or waits for them."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        """Number of keys currently held or waited for."""
        with self._guard:
            return len(self._locks)
