"""Network reachability monitoring."""

import asyncio
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


class SocketConnectivityMonitor:
    """
    Polls a TCP endpoint and reports reachability transitions.

    The first observation is always reported; afterwards only changes are.
    Transitions that happen between polls are not replayed.
    """

    def __init__(self, host: str, port: int, interval_seconds: float = 5.0,
                 check_timeout: float = 3.0):
        self.host = host
        self.port = port
        self.interval_seconds = interval_seconds
        self.check_timeout = check_timeout
        self._task: Optional[asyncio.Task] = None
        self._last: Optional[bool] = None

    def begin(self, callback: Callable[[bool], None]) -> None:
        """Start polling on the running event loop."""
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(callback))

    def end(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def check(self) -> bool:
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.check_timeout
            )
        except (OSError, asyncio.TimeoutError):
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True

    async def _run(self, callback: Callable[[bool], None]) -> None:
        while True:
            connected = await self.check()
            if connected != self._last:
                self._last = connected
                logger.info("Connectivity changed", connected=connected, host=self.host)
                callback(connected)
            await asyncio.sleep(self.interval_seconds)
