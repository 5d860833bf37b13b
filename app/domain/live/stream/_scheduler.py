"""Repeating janitor task owned by the application lifespan."""

import asyncio
import contextlib

from loguru import logger

from ._janitor import Janitor
from .stream_models import SweepReport


class JanitorScheduler:
    """Runs `Janitor.run_all` at start and then every `interval` seconds until stopped."""

    def __init__(self, janitor: Janitor, interval: float = 300.0):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._janitor = janitor
        self.interval = interval
        self._task: asyncio.Task | None = None
        self.last_report: SweepReport | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="stream-janitor")
        logger.info("Janitor scheduled every {}s", self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Janitor stopped")

    async def trigger(self) -> SweepReport:
        try:
            report = await self._janitor.run_all()
        except Exception as e:
            logger.exception("Janitor pass failed: {}", e)
            report = SweepReport()
        self.last_report = report
        return report

    async def _loop(self) -> None:
        while True:
            await self.trigger()
            await asyncio.sleep(self.interval)
