"""Readiness probing of a stream's playback URL."""

import asyncio
import time

import httpx
from loguru import logger


class ReadinessProber:
    """Polls a URL with HEAD requests until it answers 2xx or the deadline passes.

    The transcoder takes a variable amount of time to write its first playlist, so
    transport errors and non-2xx answers are retried until the deadline.
    """

    def __init__(
        self,
        poll_interval: float = 0.3,
        request_timeout: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.poll_interval = poll_interval
        self.request_timeout = request_timeout
        self._transport = transport

    async def wait_until_ready(self, url: str, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        attempts = 0
        http_timeout = httpx.Timeout(self.request_timeout, connect=self.request_timeout)

        async with httpx.AsyncClient(transport=self._transport, timeout=http_timeout) as client:
            while True:
                attempts += 1
                try:
                    response = await client.head(url)
                    if response.is_success:
                        logger.info("{} ready after {} probe(s)", url, attempts)
                        return True
                    logger.debug("Probe {} for {} returned {}", attempts, url, response.status_code)
                except httpx.HTTPError as e:
                    logger.debug("Failed to fetch {}, retrying: {}", url, e)

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                await asyncio.sleep(min(self.poll_interval, remaining))

        logger.warning("{} did not become ready within {}s ({} probes)", url, timeout, attempts)
        return False
