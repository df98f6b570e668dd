"""Per-resource locks that serialize settlements touching the same rows."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class SettlementLocks:
    """Keyed ``asyncio.Lock`` registry.

    Keys are acquired in sorted order so two settlements sharing a wallet and
    a listing cannot deadlock. Entries are dropped once nobody holds or waits
    on them. The database conditional updates still guard against writers in
    other processes.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def _get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
            self._users[key] = 0
        self._users[key] += 1
        return self._locks[key]

    def _put_lock(self, key: str) -> None:
        self._users[key] -= 1
        if self._users[key] == 0:
            del self._users[key]
            del self._locks[key]

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        ordered = sorted(set(keys))
        acquired: list[str] = []
        try:
            for key in ordered:
                lock = self._get_lock(key)
                try:
                    await lock.acquire()
                except BaseException:
                    self._put_lock(key)
                    raise
                acquired.append(key)
            yield
        finally:
            for key in reversed(acquired):
                self._locks[key].release()
                self._put_lock(key)

    def __len__(self) -> int:
        return len(self._locks)


def listing_key(listing_id: str) -> str:
    return f"listing:{listing_id}"


def wallet_key(owner_id: str) -> str:
    return f"wallet:{owner_id}"
