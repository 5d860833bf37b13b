"""Transcoder process spawning and PID-level supervision."""

import asyncio
import os
import signal

from loguru import logger


class ProcessSpawnError(Exception):
    """The transcoder could not be started or reported no pid."""


class ProcessHandle:
    """Liveness probing and termination by pid.

    Liveness is advisory: a pid can be reused by the OS after the original process
    exits, so a positive answer is an approximation.
    """

    def is_alive(self, pid: int) -> bool:
        if pid <= 0:
            return False
        try:
            os.kill(pid, 0)
        except OSError as e:
            # Includes EPERM: a pid we cannot signal is not one of our transcoders
            logger.debug("Process with PID {} is not alive: {}", pid, e)
            return False
        return True

    def terminate(self, pid: int) -> bool:
        if pid <= 0:
            logger.warning("Refusing to signal invalid PID {}", pid)
            return False
        try:
            os.kill(pid, signal.SIGTERM)
        except (ProcessLookupError, PermissionError, OSError) as e:
            logger.warning("Failed to kill PID {}: {}", pid, e)
            return False
        logger.info("Sent SIGTERM to PID {}", pid)
        return True


class SpawnedProcess:
    """A started transcoder. Exit observation is for logging only."""

    def __init__(self, process: asyncio.subprocess.Process, label: str):
        self._process = process
        self.label = label
        self._observer: asyncio.Task | None = None

    @property
    def pid(self) -> int:
        return self._process.pid

    def observe_exit(self) -> asyncio.Task:
        if self._observer is None:
            self._observer = asyncio.create_task(
                self._log_exit(), name=f"transcoder-exit:{self.label}"
            )
        return self._observer

    async def _log_exit(self) -> int | None:
        try:
            code = await self._process.wait()
        except Exception as e:
            logger.error("Transcoder error for {} (pid={}): {}", self.label, self.pid, e)
            return None
        if code == 0:
            logger.info("Transcoder for {} (pid={}) exited with code {}", self.label, self.pid, code)
        else:
            logger.warning("Transcoder for {} (pid={}) exited with code {}", self.label, self.pid, code)
        return code


class TranscoderLauncher:
    """Builds the ffmpeg relay command and starts it as a detached child.

    Video is copied as-is, audio is transcoded to AAC and the result is pushed as FLV
    to the RTMP ingest, which is what produces the HLS output.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg"):
        self.ffmpeg_path = ffmpeg_path

    def build_command(self, source_url: str, ingest_url: str) -> list[str]:
        return [
            self.ffmpeg_path,
            "-rtbufsize", "1500M",
            "-probesize", "10M",
            "-analyzeduration", "10M",
            "-i", source_url,
            "-c:v", "copy",
            "-c:a", "aac",
            "-f", "flv",
            ingest_url,
        ]

    async def spawn(self, source_url: str, ingest_url: str, *, label: str) -> SpawnedProcess:
        cmd = self.build_command(source_url, ingest_url)
        logger.debug("Spawning transcoder for {}: {}", label, " ".join(cmd))
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise ProcessSpawnError(f"Failed to start {self.ffmpeg_path}: {e}") from e

        if not process.pid:
            raise ProcessSpawnError(f"{self.ffmpeg_path} did not report a pid")

        logger.info("Spawned transcoder for {} with PID {}", label, process.pid)
        return SpawnedProcess(process, label)
