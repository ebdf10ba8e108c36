"""Request draining for graceful shutdown.

The counter is only touched from the event loop thread and never across an
await, so it needs no lock.
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from src.iotauth.core.logging import get_logger

logger = get_logger(__name__)


class RequestTracker:
    """Counts in-flight requests so shutdown can wait for them to drain."""

    def __init__(self) -> None:
        self.reset()

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    @property
    def in_flight_count(self) -> int:
        return self._in_flight

    @asynccontextmanager
    async def track_request(self) -> AsyncGenerator[None, None]:
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1
            if self._shutting_down and self._in_flight == 0:
                self._drained.set()

    async def start_shutdown(self) -> None:
        """Enter shutdown mode; /health starts reporting draining."""
        self._shutting_down = True
        logger.info("Request tracker entering shutdown mode", in_flight=self._in_flight)
        if self._in_flight == 0:
            self._drained.set()

    async def wait_for_drain(self, timeout: float) -> bool:
        """Wait up to timeout seconds. Returns False if requests were still running."""
        try:
            async with asyncio.timeout(timeout):
                await self._drained.wait()
        except TimeoutError:
            logger.warning(
                "Shutdown timeout with requests still in flight",
                timeout=timeout,
                in_flight=self._in_flight,
            )
            return False
        return True

    def reset(self) -> None:
        """Back to the idle, accepting state."""
        self._in_flight = 0
        self._shutting_down = False
        self._drained = asyncio.Event()


request_tracker = RequestTracker()
