"""In-process named lock client for serializing per-player and per-round work."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from countryquiz.utils.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)


class LockClient:
    """Hands out named asyncio locks.

    Locks are only meaningful inside one event loop; the storage layer enforces
    the same invariants across processes.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def lock(self, name: str, timeout: float = 10) -> AsyncIterator[None]:
        """Acquire the lock ``name`` for the duration of the block.

        Raises:
            LockTimeoutError: If the lock is not acquired within ``timeout`` seconds
        """
        lock = self._locks.setdefault(name, asyncio.Lock())
        self._waiters[name] = self._waiters.get(name, 0) + 1
        try:
            acquired = False
            try:
                async with asyncio.timeout(timeout):
                    await lock.acquire()
                    acquired = True
            except TimeoutError as exc:
                if acquired:
                    lock.release()
                logger.warning(f"Timed out after {timeout}s waiting for lock {name}")
                raise LockTimeoutError() from exc
            except BaseException:
                # Cancelled from outside after the acquire went through
                if acquired:
                    lock.release()
                raise
            try:
                yield
            finally:
                lock.release()
        finally:
            self._waiters[name] -= 1
            if self._waiters[name] == 0:
                # Nobody else holds or waits on it
                self._waiters.pop(name, None)
                self._locks.pop(name, None)

    def is_locked(self, name: str) -> bool:
        lock = self._locks.get(name)
        return lock is not None and lock.locked()
