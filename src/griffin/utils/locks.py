"""Per-key asyncio locks.

Serialises operations on the same key (an intent id) while letting
operations on different keys run concurrently.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable, Optional

logger = logging.getLogger(__name__)


class LockTimeoutError(Exception):
    """Raised when a lock cannot be acquired within the timeout period."""

    pass


class KeyedLock:
    """Registry of one asyncio.Lock per key.

    A key's lock exists only while some task holds it or waits for it.
    """

    def __init__(self, timeout: Optional[float] = 30.0):
        self.timeout = timeout
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def get_lock(self, key: Hashable) -> asyncio.Lock:
        """Get or create the lock for a key."""
        # No await between lookup and insert, so this is atomic on the event loop
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, key: Hashable, operation: str = "operation") -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block.

        Raises:
            LockTimeoutError: if the lock is not acquired within the timeout
        """
        lock = self.get_lock(key)
        self._users[key] = self._users.get(key, 0) + 1
        try:
            try:
                if self.timeout:
                    await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
                else:
                    await lock.acquire()
            except asyncio.TimeoutError:
                logger.warning(f"Lock timeout for {key} after {self.timeout}s: {operation}")
                raise LockTimeoutError(f"Could not acquire lock for {key} within {self.timeout}s")

            logger.debug(f"Lock acquired for {key}: {operation}")
            try:
                yield
            finally:
                lock.release()
                logger.debug(f"Lock released for {key}: {operation}")
        finally:
            self._leave(key)

    def _leave(self, key: Hashable) -> None:
        remaining = self._users[key] - 1
        if remaining:
            self._users[key] = remaining
        else:
            del self._users[key]
            self._locks.pop(key, None)

    def clear(self) -> None:
        """Drop all locks (useful for testing)."""
        self._locks.clear()
        self._users.clear()
