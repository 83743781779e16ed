"""In-process publish/subscribe for startup events."""

import threading
from collections import defaultdict
from enum import Enum
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)

Listener = Callable[[dict[str, Any]], None]


class Topic(str, Enum):
    """Published event names."""
    CONVERSION_CONSOLIDATED = "conversion_consolidated"
    DEEPLINK_OBSERVED = "deeplink_observed"
    TEMPORARY_URL_READY = "temporary_url_ready"


class EventBus:
    """Thread-safe topic fan-out. Listeners run on the publishing thread."""

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: dict[Topic, list[Listener]] = defaultdict(list)

    def subscribe(self, topic: Topic, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        with self._lock:
            self._listeners[topic].append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners[topic]:
                    self._listeners[topic].remove(listener)

        return unsubscribe

    def publish(self, topic: Topic, payload: dict[str, Any]) -> int:
        """Deliver ``payload`` to every listener of ``topic``.

        Returns:
            Number of listeners that handled the event without raising
        """
        with self._lock:
            listeners = list(self._listeners[topic])

        delivered = 0
        for listener in listeners:
            try:
                listener(payload)
                delivered += 1
            except Exception:
                logger.exception("Event listener failed", topic=topic.value)

        logger.debug("Event published", topic=topic.value, listeners=len(listeners))
        return delivered
