"""
Conversion/deeplink consolidation.

Conversion data (attribution SDK callback) and deeplink data (deeplink
resolver) arrive independently and in any order. The consolidator waits a
short window for the deeplink after a conversion lands, merges the two with
conversion values winning, and publishes the merged record exactly once per
process. The deeplink is also published on its own as soon as it arrives.
The persisted one-shot flag only gates deeplinks: every launch still needs
its conversion data to start the startup sequence.
"""

import threading
from typing import Optional

import structlog

from ..contracts import AttributionRecord
from ..store.data_facade import LocalDataFacade
from .bus import EventBus, Topic

logger = structlog.get_logger(__name__)


def merge_attribution(primary: AttributionRecord, secondary: AttributionRecord) -> AttributionRecord:
    """Return ``primary`` plus the keys only ``secondary`` has."""
    merged = dict(primary)
    for key, value in secondary.items():
        if key not in merged:
            merged[key] = value
    return merged


class EventConsolidator:
    """Merges conversion and deeplink payloads into one published record."""

    def __init__(self, bus: EventBus, data: LocalDataFacade, window_seconds: float = 2.0):
        self.logger = logger
        self.bus = bus
        self.data = data
        self.window_seconds = window_seconds

        self._lock = threading.Lock()
        self._conversion: AttributionRecord = {}
        self._deeplink: AttributionRecord = {}
        self._has_conversion = False
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._delivered = False

    @property
    def delivered(self) -> bool:
        return self._delivered

    def submit_conversion(self, payload: AttributionRecord) -> None:
        """Record conversion data and (re)start the consolidation window."""
        with self._lock:
            if self._delivered:
                self.logger.info("Conversion ignored, attribution already consolidated")
                return

            self._conversion = dict(payload)
            self._has_conversion = True
            self._restart_timer()

            merged = self._take_merged() if self._deeplink else None

        if merged is not None:
            self._publish(merged)

    def submit_deeplink(self, payload: AttributionRecord) -> None:
        """Record deeplink data, publish it standalone, consolidate if possible.

        Ignored once this install has consolidated, even in a later process.
        """
        with self._lock:
            if self._delivered or self.data.was_attribution_consolidated():
                self.logger.info("Deeplink ignored, attribution already consolidated")
                return

            self._deeplink = dict(payload)
            self._cancel_timer()

            merged = self._take_merged() if self._has_conversion else None

        self.bus.publish(Topic.DEEPLINK_OBSERVED, dict(payload))

        if merged is not None:
            self._publish(merged)

    def cancel(self) -> None:
        """Stop any pending consolidation window."""
        with self._lock:
            self._cancel_timer()

    def _on_window_elapsed(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._delivered:
                return
            self._timer = None
            merged = self._take_merged()

        self.logger.debug("Consolidation window elapsed", window_seconds=self.window_seconds)
        self._publish(merged)

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._timer = threading.Timer(
            self.window_seconds,
            self._on_window_elapsed,
            args=(self._generation,)
        )
        self._timer.daemon = True
        self._timer.start()

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _take_merged(self) -> AttributionRecord:
        """Build the merged record and mark delivery. Caller holds the lock."""
        self._cancel_timer()
        self._delivered = True
        return merge_attribution(self._conversion, self._deeplink)

    def _publish(self, merged: AttributionRecord) -> None:
        self.data.mark_attribution_consolidated()
        self.logger.info(
            "Attribution consolidated",
            keys=sorted(merged),
            with_deeplink=bool(self._deeplink)
        )
        self.bus.publish(Topic.CONVERSION_CONSOLIDATED, merged)
