from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeySerializer:
    """Runs operations on the same key one at a time, in arrival order.

    ``asyncio.Lock`` wakes waiters first-in first-out, so a lock per key acts
    as an in-order task queue for that key. Different keys do not block each
    other.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        async with lock:
            yield
