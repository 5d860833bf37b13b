"""Per-source admission locks for starting streams.

Holding the lock for a source URL serializes `start` calls for that source only, so
the dedup check and the record insert cannot interleave with a concurrent start for
the same source.
"""

import asyncio
import hashlib
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from loguru import logger

from app.shared.lock import LockManager


class AdmissionLock(Protocol):
    def hold(self, key: str) -> AbstractAsyncContextManager[bool]: ...


class LocalAdmissionLock:
    """In-process locks keyed by source URL. Entries are dropped once unused."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[bool]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield True
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class RedisAdmissionLock:
    """Cross-process admission lock backed by Redis `SET NX EX`.

    Yields False when the lock could not be acquired within `blocking_timeout`.
    """

    def __init__(
        self,
        redis_client,
        ttl: int = 60,
        blocking_timeout: float = 15.0,
        lock_prefix: str = "stream-relay:admission",
    ):
        self.redis_client = redis_client
        self.ttl = ttl
        self.blocking_timeout = blocking_timeout
        self.lock_prefix = lock_prefix

    @staticmethod
    def _key_for(source_url: str) -> str:
        return hashlib.sha256(source_url.encode("utf-8")).hexdigest()[:32]

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[bool]:
        async with LockManager(self.redis_client, lock_prefix=self.lock_prefix, default_ttl=self.ttl) as lock:
            acquired = await lock.acquire(self._key_for(key), blocking_timeout=self.blocking_timeout)
            if not acquired:
                logger.warning("Admission lock busy for source {}", key)
            yield acquired
