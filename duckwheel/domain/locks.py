"""Per-user locks shared by every service that writes a user record."""

from __future__ import annotations

import asyncio
from collections import Counter
from contextlib import asynccontextmanager
from typing import AsyncIterator


class UserLocks:
    """Serialise read-modify-write cycles per user id within one process.

    A lock lives only while someone holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: Counter[str] = Counter()

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._holders[user_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._holders[user_id] -= 1
            if self._holders[user_id] <= 0:
                del self._holders[user_id]
                del self._locks[user_id]

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._locks

    def __len__(self) -> int:
        return len(self._locks)
