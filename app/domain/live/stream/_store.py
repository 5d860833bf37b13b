"""Record stores for stream sessions.

Every call is atomic on its own; callers never rely on multi-record transactions.
"""

import asyncio
from datetime import datetime
from typing import Protocol

from loguru import logger
from pymongo.errors import DuplicateKeyError

from app.schemas import Stream

from .stream_models import StreamSession


class StreamStore(Protocol):
    async def count_active(self, now: datetime) -> int: ...

    async def find_by_source(self, source_url: str) -> list[StreamSession]: ...

    async def find_all(self) -> list[StreamSession]: ...

    async def find_expired(self, now: datetime) -> list[StreamSession]: ...

    async def get(self, stream_id: str) -> StreamSession | None: ...

    async def create(self, session: StreamSession) -> StreamSession: ...

    async def destroy(self, stream_id: str) -> bool: ...


class InMemoryStreamStore:
    """Dict-backed store for tests and single-node embedded runs."""

    def __init__(self):
        self._records: dict[str, StreamSession] = {}
        self._lock = asyncio.Lock()

    async def count_active(self, now: datetime) -> int:
        return sum(1 for s in self._records.values() if s.expires_at > now)

    async def find_by_source(self, source_url: str) -> list[StreamSession]:
        """Newest first; equal start times keep the later insert first."""
        matches = [s for s in self._records.values() if s.source_url == source_url]
        matches.reverse()
        return sorted(matches, key=lambda s: s.start_time, reverse=True)

    async def find_all(self) -> list[StreamSession]:
        return sorted(self._records.values(), key=lambda s: s.start_time)

    async def find_expired(self, now: datetime) -> list[StreamSession]:
        return [s for s in await self.find_all() if s.expires_at < now]

    async def get(self, stream_id: str) -> StreamSession | None:
        return self._records.get(stream_id)

    async def create(self, session: StreamSession) -> StreamSession:
        async with self._lock:
            if session.stream_id in self._records:
                raise ValueError(f"Stream already exists: {session.stream_id}")
            self._records[session.stream_id] = session
        return session

    async def destroy(self, stream_id: str) -> bool:
        async with self._lock:
            return self._records.pop(stream_id, None) is not None


class BeanieStreamStore:
    """MongoDB store over the `stream` collection."""

    @staticmethod
    def _to_session(doc: Stream) -> StreamSession:
        return StreamSession(
            stream_id=doc.stream_id,
            pid=doc.pid,
            source_url=doc.source_url,
            output_url=doc.output_url,
            start_time=doc.start_time,
            expires_at=doc.expires_at,
        )

    async def count_active(self, now: datetime) -> int:
        return await Stream.find(Stream.expires_at > now).count()

    async def find_by_source(self, source_url: str) -> list[StreamSession]:
        # _id breaks start_time ties (millisecond precision) in insert order
        docs = await Stream.find(Stream.source_url == source_url).sort("-start_time", "-_id").to_list()
        return [self._to_session(doc) for doc in docs]

    async def find_all(self) -> list[StreamSession]:
        docs = await Stream.find_all().sort("+start_time").to_list()
        return [self._to_session(doc) for doc in docs]

    async def find_expired(self, now: datetime) -> list[StreamSession]:
        docs = await Stream.find(Stream.expires_at < now).sort("+start_time").to_list()
        return [self._to_session(doc) for doc in docs]

    async def get(self, stream_id: str) -> StreamSession | None:
        doc = await Stream.find_one(Stream.stream_id == stream_id)
        return self._to_session(doc) if doc else None

    async def create(self, session: StreamSession) -> StreamSession:
        doc = Stream(**session.model_dump())
        try:
            await doc.insert()
        except DuplicateKeyError:
            logger.error("Duplicate stream_id on insert: {}", session.stream_id)
            raise
        return session

    async def destroy(self, stream_id: str) -> bool:
        result = await Stream.find(Stream.stream_id == stream_id).delete()
        return bool(result and result.deleted_count > 0)
