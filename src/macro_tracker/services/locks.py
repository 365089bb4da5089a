"""Per-key async locking."""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


@dataclass
class KeyedLock:
    """Serialises coroutines that share a key.

    Locks are created on first use and dropped once no coroutine holds or
    waits on them.
    """

    _locks: dict[Hashable, asyncio.Lock] = field(default_factory=dict)
    _users: dict[Hashable, int] = field(default_factory=dict)

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                self._users.pop(key, None)
                self._locks.pop(key, None)
