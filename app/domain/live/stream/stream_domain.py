"""Stream domain service - lifecycle and janitor wired from configuration."""

import asyncio
import math

from loguru import logger

from app.app_config import StreamEnvironConfig, get_app_environ_config
from app.shared.storage.redis import get_redis_manager

from ._admission import AdmissionLock, LocalAdmissionLock, RedisAdmissionLock
from ._janitor import Janitor
from ._lifecycle import LifecycleManager
from ._outcome import Outcome
from ._process import ProcessHandle, TranscoderLauncher
from ._pruner import OutputFilePruner
from ._readiness import ReadinessProber
from ._scheduler import JanitorScheduler
from ._store import BeanieStreamStore, InMemoryStreamStore, StreamStore
from .stream_models import StopResult, StreamSession, SweepReport


class StreamService:
    """Entry point used by the API layer and the application lifespan."""

    def __init__(
        self,
        manager: LifecycleManager,
        janitor: Janitor,
        scheduler: JanitorScheduler,
        pruner: OutputFilePruner,
        *,
        uses_redis: bool = False,
    ):
        self.manager = manager
        self.janitor = janitor
        self.scheduler = scheduler
        self.pruner = pruner
        self._uses_redis = uses_redis

    @classmethod
    def from_config(cls, settings: StreamEnvironConfig | None = None) -> "StreamService":
        settings = settings or get_app_environ_config()

        store: StreamStore
        if settings.STREAM_STORE == "memory":
            store = InMemoryStreamStore()
        else:
            store = BeanieStreamStore()

        admission: AdmissionLock
        uses_redis = settings.STREAM_ADMISSION_LOCK == "redis"
        if uses_redis:
            # The holder keeps the lock through spawn and the readiness wait
            hold_for = settings.readiness_timeout + 5
            admission = RedisAdmissionLock(
                get_redis_manager().get_client(),
                ttl=math.ceil(hold_for) + 30,
                blocking_timeout=hold_for,
            )
        else:
            admission = LocalAdmissionLock()

        process = ProcessHandle()
        pruner = OutputFilePruner(settings.HLS_DIR)
        manager = LifecycleManager(
            store,
            TranscoderLauncher(settings.FFMPEG_PATH),
            ReadinessProber(poll_interval=settings.readiness_poll_interval),
            pruner,
            rtmp_base_url=settings.RTMP_BASE_URL,
            hls_base_url=settings.HLS_BASE_URL,
            max_concurrent=settings.STREAM_MAX_CONCURRENT,
            stream_duration=settings.stream_duration,
            readiness_timeout=settings.readiness_timeout,
            process=process,
            admission=admission,
        )
        janitor = Janitor(store, pruner, retention=settings.hls_retention, process=process)
        scheduler = JanitorScheduler(janitor, interval=settings.JANITOR_INTERVAL_SECONDS)

        logger.info(
            "Stream service configured: store={} admission={} max_concurrent={} hls_dir={}",
            settings.STREAM_STORE,
            settings.STREAM_ADMISSION_LOCK,
            settings.STREAM_MAX_CONCURRENT,
            pruner.hls_dir,
        )
        return cls(manager, janitor, scheduler, pruner, uses_redis=uses_redis)

    # ==================== STREAMS ====================

    async def start_stream(self, source_url: str) -> Outcome[StreamSession]:
        """Start (or reuse) the transcoder for `source_url`."""
        return await self.manager.start(source_url)

    async def stop_stream(self, stream_id: str) -> Outcome[StopResult]:
        return await self.manager.stop(stream_id)

    async def list_streams(self) -> list[StreamSession]:
        return await self.manager.list()

    # ==================== JANITOR ====================

    async def run_cleanup(self) -> SweepReport:
        """Run one janitor pass now, outside the schedule."""
        return await self.scheduler.trigger()

    async def startup(self) -> None:
        await asyncio.to_thread(self.pruner.ensure_dir)
        self.scheduler.start()

    async def shutdown(self) -> None:
        await self.scheduler.stop()
        if self._uses_redis:
            await get_redis_manager().close()


_stream_service: StreamService | None = None


def get_stream_service() -> StreamService:
    global _stream_service
    if _stream_service is None:
        _stream_service = StreamService.from_config()
    return _stream_service
