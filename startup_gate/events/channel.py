"""
Message channel between the attribution SDK and the consolidator.

SDK-facing code only knows this channel; whatever subscribes to it decides
what to do with the payloads.
"""

import threading
from typing import Any, Callable, Optional

import structlog

from ..contracts import AttributionRecord

logger = structlog.get_logger(__name__)

PayloadHandler = Callable[[AttributionRecord], None]


class AttributionChannel:
    """Routes conversion and deeplink callbacks to one subscriber each."""

    def __init__(self):
        self._lock = threading.Lock()
        self._on_conversion: Optional[PayloadHandler] = None
        self._on_deeplink: Optional[PayloadHandler] = None

    def connect(self, on_conversion: PayloadHandler, on_deeplink: PayloadHandler) -> None:
        with self._lock:
            self._on_conversion = on_conversion
            self._on_deeplink = on_deeplink

    def conversion_succeeded(self, payload: dict[Any, Any]) -> None:
        self._dispatch("conversion", self._on_conversion, payload)

    def conversion_failed(self, error: Optional[BaseException] = None) -> None:
        # Failure still counts as an (empty) conversion so startup can proceed
        logger.warning("Conversion data unavailable", error=str(error) if error else None)
        self._dispatch("conversion", self._on_conversion, {})

    def deeplink_resolved(self, payload: dict[Any, Any]) -> None:
        self._dispatch("deeplink", self._on_deeplink, payload)

    def _dispatch(self, kind: str, handler: Optional[PayloadHandler], payload: dict[Any, Any]) -> None:
        if handler is None:
            logger.warning("No subscriber for attribution payload", kind=kind)
            return

        record = {str(key): value for key, value in payload.items()}
        logger.info("Attribution payload received", kind=kind, keys=sorted(record))
        handler(record)
