"""
Redis client holder for the distributed admission lock.
"""

import threading

from loguru import logger
from redis.asyncio import Redis

from ..config import config


class RedisManager:
    """Creates one shared async Redis client on first use and closes it on shutdown."""

    def __init__(self, url: str | None = None):
        self._url = url
        self._client: Redis | None = None
        self._lock = threading.Lock()

    def get_client(self) -> Redis:
        with self._lock:
            if self._client is None:
                url = self._url or config.get_redis_url()
                self._client = Redis.from_url(url, decode_responses=True)
                logger.info("Open Redis client: {}", url.split("@")[-1])
            return self._client

    async def close(self):
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            await client.aclose()
            logger.info("Closed Redis client")


_redis_manager: RedisManager | None = None


def get_redis_manager() -> RedisManager:
    global _redis_manager
    if _redis_manager is None:
        _redis_manager = RedisManager()
    return _redis_manager
