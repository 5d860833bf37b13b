"""Tests for the per-source admission locks."""

import asyncio
from unittest.mock import AsyncMock

from app.domain.live.stream._admission import LocalAdmissionLock, RedisAdmissionLock


class TestLocalAdmissionLock:
    async def test_serializes_same_key(self):
        lock = LocalAdmissionLock()
        events: list[str] = []

        async def worker(name: str):
            async with lock.hold("rtsp://cam/a") as acquired:
                assert acquired is True
                events.append(f"{name}:in")
                await asyncio.sleep(0.02)
                events.append(f"{name}:out")

        await asyncio.gather(worker("first"), worker("second"))

        assert events == ["first:in", "first:out", "second:in", "second:out"]

    async def test_different_keys_do_not_block(self):
        lock = LocalAdmissionLock()
        inside = asyncio.Event()

        async with lock.hold("rtsp://cam/a"):
            async with lock.hold("rtsp://cam/b") as acquired:
                inside.set()

        assert acquired is True
        assert inside.is_set()

    async def test_entries_dropped_when_unused(self):
        lock = LocalAdmissionLock()

        async with lock.hold("rtsp://cam/a"):
            assert len(lock) == 1

        assert len(lock) == 0


class TestRedisAdmissionLock:
    async def test_acquire_and_release(self):
        redis_client = AsyncMock()
        redis_client.set.return_value = True
        redis_client.eval.return_value = 1
        lock = RedisAdmissionLock(redis_client, ttl=30, blocking_timeout=1.0)

        async with lock.hold("rtsp://cam/a") as acquired:
            assert acquired is True

        key = redis_client.set.await_args.args[0]
        assert key.startswith("stream-relay:admission:")
        assert "rtsp" not in key
        assert redis_client.set.await_args.kwargs == {"nx": True, "ex": 30}
        redis_client.eval.assert_awaited_once()

    async def test_busy_yields_false(self):
        redis_client = AsyncMock()
        redis_client.set.return_value = None
        lock = RedisAdmissionLock(redis_client, blocking_timeout=0)

        async with lock.hold("rtsp://cam/a") as acquired:
            assert acquired is False

        redis_client.eval.assert_not_awaited()
