"""Per-key asyncio locks."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List


class KeyedLocks:
    """A lazily populated family of asyncio locks, one per key.

    Locks are dropped again once nobody holds or waits for them, so the
    table only grows with the number of keys being written concurrently.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        """Hold the locks for all keys.

        Keys are acquired in sorted order so two holders of overlapping key
        sets cannot deadlock.
        """
        ordered = sorted(set(keys))
        registered: List[str] = []
        acquired: List[asyncio.Lock] = []
        try:
            for key in ordered:
                lock = self._locks.get(key)
                if lock is None:
                    lock = self._locks[key] = asyncio.Lock()
                self._users[key] = self._users.get(key, 0) + 1
                registered.append(key)
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in registered:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]
