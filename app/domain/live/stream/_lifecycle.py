"""Stream admission, stop and listing."""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta

from loguru import logger

from app.domain.utils.clock import utc_now
from app.domain.utils.idgen import new_stream_id

from ._admission import AdmissionLock, LocalAdmissionLock
from ._outcome import Failure, Ok, Outcome, StreamErrorKind
from ._process import ProcessHandle, ProcessSpawnError, TranscoderLauncher
from ._pruner import OutputFilePruner
from ._readiness import ReadinessProber
from ._store import StreamStore
from .stream_models import StopResult, StreamSession


class LifecycleManager:
    """Admits, stops and lists transcoding streams.

    `start` holds the admission lock of its own source URL for the whole
    spawn/readiness wait. Across sources only the capacity count and slot
    reservation are serialized, so streams for different sources never wait on each
    other's readiness.
    """

    def __init__(
        self,
        store: StreamStore,
        launcher: TranscoderLauncher,
        prober: ReadinessProber,
        pruner: OutputFilePruner,
        *,
        rtmp_base_url: str,
        hls_base_url: str,
        max_concurrent: int = 10,
        stream_duration: timedelta = timedelta(minutes=5),
        readiness_timeout: float = 10.0,
        process: ProcessHandle | None = None,
        admission: AdmissionLock | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        if stream_duration <= timedelta(0):
            raise ValueError("stream_duration must be positive")

        self._store = store
        self._launcher = launcher
        self._prober = prober
        self._pruner = pruner
        self._process = process or ProcessHandle()
        self._admission = admission or LocalAdmissionLock()
        self._clock = clock

        self.rtmp_base_url = rtmp_base_url.rstrip("/")
        self.hls_base_url = hls_base_url.rstrip("/")
        self.max_concurrent = max_concurrent
        self.stream_duration = stream_duration
        self.readiness_timeout = readiness_timeout

        self._guard = asyncio.Lock()
        self._pending = 0
        self._observers: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Admissions past the capacity check that have not finished yet."""
        return self._pending

    def output_url_for(self, stream_id: str) -> str:
        return f"{self.hls_base_url}/{stream_id}.m3u8"

    def ingest_url_for(self, stream_id: str) -> str:
        return f"{self.rtmp_base_url}/{stream_id}"

    async def start(self, source_url: str) -> Outcome[StreamSession]:
        async with self._admission.hold(source_url) as acquired:
            if not acquired:
                return Failure(
                    StreamErrorKind.ADMISSION_BUSY,
                    "Another start for this source is in progress",
                )

            async with self._guard:
                active = await self._store.count_active(self._clock())
                if active + self._pending >= self.max_concurrent:
                    logger.warning(
                        "Stream limit reached: active={} pending={} max={}",
                        active, self._pending, self.max_concurrent,
                    )
                    return Failure(StreamErrorKind.CAPACITY_EXCEEDED, "Stream limit reached")

                self._pending += 1

            try:
                existing = await self._find_live(source_url)
                if existing:
                    logger.info(
                        "Reusing stream {} (pid={}) for {}",
                        existing.stream_id, existing.pid, source_url,
                    )
                    return Ok(existing)

                return await self._admit(source_url)
            finally:
                self._pending -= 1

    async def _find_live(self, source_url: str) -> StreamSession | None:
        """Newest record for the source whose transcoder is still running."""
        for session in await self._store.find_by_source(source_url):
            if self._process.is_alive(session.pid):
                return session
        return None

    async def _admit(self, source_url: str) -> Outcome[StreamSession]:
        stream_id = new_stream_id()
        output_url = self.output_url_for(stream_id)

        try:
            spawned = await self._launcher.spawn(
                source_url, self.ingest_url_for(stream_id), label=stream_id
            )
        except ProcessSpawnError as e:
            logger.error("Transcoder failed to start for {}: {}", source_url, e)
            return Failure(StreamErrorKind.PROCESS_SPAWN_FAILED, "FFmpeg process failed to start")

        self._track(spawned.observe_exit())

        if not await self._prober.wait_until_ready(output_url, self.readiness_timeout):
            logger.warning(
                "Stream {} (pid={}) not ready in time; leaving it to the janitor",
                stream_id, spawned.pid,
            )
            return Failure(
                StreamErrorKind.READINESS_TIMEOUT,
                "HLS .m3u8 did not appear in time (HTTP 200)",
            )

        now = self._clock()
        session = StreamSession(
            stream_id=stream_id,
            pid=spawned.pid,
            source_url=source_url,
            output_url=output_url,
            start_time=now,
            expires_at=now + self.stream_duration,
        )
        await self._store.create(session)

        logger.info("Started stream {} (pid={}) for {}", stream_id, spawned.pid, source_url)
        return Ok(session)

    def _track(self, task: asyncio.Task) -> None:
        self._observers.add(task)
        task.add_done_callback(self._observers.discard)

    async def stop(self, stream_id: str) -> Outcome[StopResult]:
        session = await self._store.get(stream_id)
        if session is None:
            return Failure(StreamErrorKind.NOT_FOUND, f"Stream not found: {stream_id}")

        self._process.terminate(session.pid)

        if not await self._store.destroy(stream_id):
            logger.info("Stream {} was already removed", stream_id)

        await asyncio.to_thread(self._pruner.delete_artifacts, stream_id)

        logger.info("Stopped stream {}", stream_id)
        return Ok(StopResult())

    async def list(self) -> list[StreamSession]:
        """All stored records, including expired ones the janitor has not swept yet."""
        return await self._store.find_all()
