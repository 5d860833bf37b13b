"""Tests for ProcessHandle and TranscoderLauncher against real child processes."""

import asyncio
import os
import signal

import pytest

from app.domain.live.stream._process import (
    ProcessHandle,
    ProcessSpawnError,
    SpawnedProcess,
    TranscoderLauncher,
)


class TestProcessHandle:
    def test_current_process_is_alive(self):
        assert ProcessHandle().is_alive(os.getpid()) is True

    @pytest.mark.parametrize("pid", [0, -1])
    def test_non_positive_pid_is_not_alive(self, pid):
        handle = ProcessHandle()

        assert handle.is_alive(pid) is False
        assert handle.terminate(pid) is False

    def test_unsignalable_pid_is_not_alive(self, monkeypatch):
        """A pid owned by another user (EPERM) is treated as not alive."""

        def deny(pid, sig):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr("app.domain.live.stream._process.os.kill", deny)

        assert ProcessHandle().is_alive(4242) is False

    async def test_terminate_and_reap(self):
        """SIGTERM stops the child and a reaped pid is no longer alive."""
        handle = ProcessHandle()
        child = await asyncio.create_subprocess_exec("sleep", "30")

        assert handle.is_alive(child.pid) is True
        assert handle.terminate(child.pid) is True

        code = await asyncio.wait_for(child.wait(), timeout=5)

        assert code == -signal.SIGTERM
        assert handle.is_alive(child.pid) is False
        assert handle.terminate(child.pid) is False


class TestTranscoderLauncher:
    def test_build_command(self):
        launcher = TranscoderLauncher("/usr/bin/ffmpeg")

        cmd = launcher.build_command("rtsp://cam/1", "rtmp://ingest/live/st_1")

        assert cmd[0] == "/usr/bin/ffmpeg"
        assert cmd[cmd.index("-i") + 1] == "rtsp://cam/1"
        assert cmd[cmd.index("-c:v") + 1] == "copy"
        assert cmd[cmd.index("-c:a") + 1] == "aac"
        assert cmd[-3:] == ["-f", "flv", "rtmp://ingest/live/st_1"]

    async def test_missing_executable_raises(self, tmp_path):
        launcher = TranscoderLauncher(str(tmp_path / "no-ffmpeg"))

        with pytest.raises(ProcessSpawnError):
            await launcher.spawn("rtsp://cam/1", "rtmp://ingest/live/st_1", label="st_1")


class TestSpawnedProcess:
    async def test_observe_exit_reports_code(self):
        child = await asyncio.create_subprocess_exec("sh", "-c", "exit 3")
        spawned = SpawnedProcess(child, "st_exit")

        task = spawned.observe_exit()

        assert spawned.observe_exit() is task
        assert await asyncio.wait_for(task, timeout=5) == 3
        assert spawned.pid == child.pid
