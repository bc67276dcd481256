import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class AccountLocks:
    """Per-account mutual exclusion for in-process balance changes.

    Locks are always taken in sorted account id order, so two transfers over
    the same pair in opposite directions cannot deadlock.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, account_id: str) -> asyncio.Lock:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = self._locks[account_id] = asyncio.Lock()
        return lock

    def is_locked(self, account_id: str) -> bool:
        lock = self._locks.get(account_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, *account_ids: str) -> AsyncIterator[None]:
        ordered = [self._lock_for(account_id) for account_id in sorted(set(account_ids))]
        acquired: list[asyncio.Lock] = []
        try:
            for lock in ordered:
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
