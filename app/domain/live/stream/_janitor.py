"""Reconciliation sweeps between records, processes and on-disk artifacts."""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta

from loguru import logger

from app.domain.utils.clock import utc_now

from ._process import ProcessHandle
from ._pruner import OutputFilePruner
from ._store import StreamStore
from .stream_models import StreamSession, SweepReport


class Janitor:
    """Removes expired streams, dead-process records and stale HLS files.

    Every sweep is idempotent and may run concurrently with the others and with
    start/stop. A failure on one record is logged and the batch carries on.
    """

    def __init__(
        self,
        store: StreamStore,
        pruner: OutputFilePruner,
        *,
        retention: timedelta = timedelta(minutes=5),
        process: ProcessHandle | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._pruner = pruner
        self._process = process or ProcessHandle()
        self._clock = clock
        self.retention = retention

    async def _retire(self, session: StreamSession) -> bool:
        await asyncio.to_thread(self._pruner.delete_artifacts, session.stream_id)
        return await self._store.destroy(session.stream_id)

    async def sweep_expired(self) -> int:
        expired = await self._store.find_expired(self._clock())
        removed = 0
        for session in expired:
            try:
                self._process.terminate(session.pid)
                if await self._retire(session):
                    removed += 1
            except Exception as e:
                logger.error("Failed to retire expired stream {}: {}", session.stream_id, e)

        if removed:
            logger.info("Expired {} stream(s)", removed)
        return removed

    async def sweep_old_artifacts(self) -> int:
        return await asyncio.to_thread(self._pruner.prune_older_than, self.retention)

    async def sweep_dead_processes(self) -> int:
        removed = 0
        for session in await self._store.find_all():
            if self._process.is_alive(session.pid):
                continue
            try:
                if await self._retire(session):
                    removed += 1
                    logger.info(
                        "Removed stream {} whose transcoder (pid={}) is gone",
                        session.stream_id, session.pid,
                    )
            except Exception as e:
                logger.error("Failed to remove dead stream {}: {}", session.stream_id, e)
        return removed

    async def run_all(self) -> SweepReport:
        """Run the three sweeps concurrently. A failed sweep reports None."""
        names = ("expired", "old_artifacts", "dead_processes")
        results = await asyncio.gather(
            self.sweep_expired(),
            self.sweep_old_artifacts(),
            self.sweep_dead_processes(),
            return_exceptions=True,
        )

        counts: dict[str, int | None] = {}
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.opt(exception=result).error("Sweep {} failed: {}", name, result)
                counts[name] = None
            else:
                counts[name] = result

        report = SweepReport(**counts)
        logger.debug("Janitor pass finished: {}", report)
        return report
