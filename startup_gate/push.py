"""Push notification payload handling."""

import threading
from typing import Any, Optional

import structlog

from .events.bus import EventBus, Topic
from .store.data_facade import LocalDataFacade

logger = structlog.get_logger(__name__)


def extract_url(payload: dict[Any, Any]) -> Optional[str]:
    """Return ``payload["url"]`` or ``payload["data"]["url"]`` when it is a string."""
    url = payload.get("url")
    if isinstance(url, str):
        return url

    nested = payload.get("data")
    if isinstance(nested, dict):
        url = nested.get("url")
        if isinstance(url, str):
            return url

    return None


class MessageAdapter:
    """Stores push-delivered URLs and announces them after a short delay."""

    def __init__(self, data: LocalDataFacade, bus: EventBus, delay_seconds: float = 2.0):
        self.data = data
        self.bus = bus
        self.delay_seconds = delay_seconds
        self._timers: list[threading.Timer] = []
        self._lock = threading.Lock()

    def process(self, payload: dict[Any, Any]) -> Optional[str]:
        """Handle a notification payload; returns the URL it carried, if any."""
        url = extract_url(payload)
        if url is None:
            logger.debug("Notification without URL ignored", keys=sorted(map(str, payload)))
            return None

        self.data.store_temporary_url(url)
        logger.info("Temporary URL stored", url=url)

        timer = threading.Timer(self.delay_seconds, self._announce, args=(url,))
        timer.daemon = True
        with self._lock:
            self._timers.append(timer)
        timer.start()
        return url

    def cancel(self) -> None:
        with self._lock:
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()

    def _announce(self, url: str) -> None:
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive() and t is not threading.current_thread()]
        self.bus.publish(Topic.TEMPORARY_URL_READY, {"temp_url": url})
