"""Tests for JanitorScheduler."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from app.domain.live.stream._janitor import Janitor
from app.domain.live.stream._scheduler import JanitorScheduler
from app.domain.live.stream.stream_models import SweepReport


@pytest.fixture
def mock_janitor() -> AsyncMock:
    janitor = AsyncMock(spec=Janitor)
    janitor.run_all.return_value = SweepReport(expired=1, old_artifacts=2, dead_processes=0)
    return janitor


async def _until(predicate, timeout: float = 1.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


class TestJanitorScheduler:
    async def test_runs_immediately_then_repeats(self, mock_janitor):
        """The first pass runs at start, later passes every interval."""
        scheduler = JanitorScheduler(mock_janitor, interval=0.01)

        scheduler.start()
        await _until(lambda: mock_janitor.run_all.await_count >= 3)
        await scheduler.stop()

        assert not scheduler.running
        assert scheduler.last_report == SweepReport(expired=1, old_artifacts=2, dead_processes=0)

    async def test_start_twice_is_noop(self, mock_janitor):
        scheduler = JanitorScheduler(mock_janitor, interval=60)

        scheduler.start()
        task = scheduler._task
        scheduler.start()

        assert scheduler._task is task
        await scheduler.stop()

    async def test_stop_without_start(self, mock_janitor):
        scheduler = JanitorScheduler(mock_janitor, interval=60)

        await scheduler.stop()

        assert not scheduler.running

    async def test_failed_pass_keeps_loop_alive(self, mock_janitor):
        """An exception from a pass is logged and the loop continues."""
        mock_janitor.run_all.side_effect = [RuntimeError("boom"), SweepReport(expired=0)]
        scheduler = JanitorScheduler(mock_janitor, interval=0.01)

        scheduler.start()
        await _until(lambda: mock_janitor.run_all.await_count >= 2)

        assert scheduler.running
        await scheduler.stop()

    async def test_trigger_returns_report(self, mock_janitor):
        scheduler = JanitorScheduler(mock_janitor, interval=60)

        report = await scheduler.trigger()

        assert report.old_artifacts == 2
        assert scheduler.last_report is report

    async def test_trigger_failure_returns_empty_report(self, mock_janitor):
        mock_janitor.run_all.side_effect = RuntimeError("boom")
        scheduler = JanitorScheduler(mock_janitor, interval=60)

        report = await scheduler.trigger()

        assert report == SweepReport()

    def test_rejects_non_positive_interval(self, mock_janitor):
        with pytest.raises(ValueError):
            JanitorScheduler(mock_janitor, interval=0)
