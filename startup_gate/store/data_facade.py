"""
Data facade for everything the startup sequence remembers.

Persisted values go to the injected key-value store; attribution and
deeplink records are cached in memory for the current process only.
"""

import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import structlog

from ..contracts import AttributionRecord
from .kv_store import KeyValueStore

logger = structlog.get_logger(__name__)


class AppMode(str, Enum):
    """Persisted app mode flag."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Key:
    """Persisted key names."""
    URL = "cached_endpoint"
    MODE = "app_status"
    FIRST_RUN = "launched_before"
    PERMISSION_REQUEST = "permission_request_time"
    PERMISSION_GRANTED = "permissions_accepted"
    PERMISSION_DENIED = "permissions_denied"
    CONSOLIDATED = "tracking_data_sent"
    TEMP_URL = "temp_url"
    PUSH_TOKEN = "push_token"


class LocalDataFacade:
    """Typed access to persisted startup flags plus in-process caches."""

    def __init__(self, storage: KeyValueStore):
        self.storage = storage
        self._cache_lock = threading.Lock()
        self._attribution: AttributionRecord = {}
        self._deeplink: AttributionRecord = {}

    # Attribution / deeplink (in-memory)

    def persist_attribution(self, data: AttributionRecord) -> None:
        with self._cache_lock:
            self._attribution = dict(data)

    def retrieve_attribution(self) -> AttributionRecord:
        with self._cache_lock:
            return dict(self._attribution)

    def persist_deeplink(self, data: AttributionRecord) -> None:
        with self._cache_lock:
            self._deeplink = dict(data)

    def retrieve_deeplink(self) -> AttributionRecord:
        with self._cache_lock:
            return dict(self._deeplink)

    # Resolved destination

    def cache_url(self, url: str) -> None:
        self.storage.set(Key.URL, url)

    def retrieve_cached_url(self) -> Optional[str]:
        return self.storage.get(Key.URL) or None

    # App mode

    def set_mode(self, mode: AppMode) -> None:
        self.storage.set(Key.MODE, AppMode(mode).value)

    def retrieve_mode(self) -> Optional[str]:
        return self.storage.get(Key.MODE)

    # First run

    def is_first_run(self) -> bool:
        return not self.storage.get(Key.FIRST_RUN, False)

    def mark_first_run_complete(self) -> None:
        self.storage.set(Key.FIRST_RUN, True)

    # Permission prompt bookkeeping

    def record_permission_dismissal(self, when: datetime) -> None:
        self.storage.set(Key.PERMISSION_REQUEST, when.timestamp())

    def retrieve_last_permission_request(self) -> Optional[datetime]:
        value = self.storage.get(Key.PERMISSION_REQUEST)
        if value is None:
            return None
        return datetime.fromtimestamp(float(value), tz=timezone.utc)

    def save_permission_result(self, granted: bool, denied: bool) -> None:
        self.storage.set(Key.PERMISSION_GRANTED, granted)
        self.storage.set(Key.PERMISSION_DENIED, denied)

    def was_permission_granted(self) -> bool:
        return bool(self.storage.get(Key.PERMISSION_GRANTED, False))

    def was_permission_denied(self) -> bool:
        return bool(self.storage.get(Key.PERMISSION_DENIED, False))

    # Consolidation one-shot flag

    def was_attribution_consolidated(self) -> bool:
        return bool(self.storage.get(Key.CONSOLIDATED, False))

    def mark_attribution_consolidated(self) -> None:
        self.storage.set(Key.CONSOLIDATED, True)

    # Temporary URL from push payloads

    def store_temporary_url(self, url: str) -> None:
        self.storage.set(Key.TEMP_URL, url)

    def peek_temporary_url(self) -> Optional[str]:
        return self.storage.get(Key.TEMP_URL) or None

    def consume_temporary_url(self) -> Optional[str]:
        url = self.peek_temporary_url()
        if url is not None:
            self.storage.delete(Key.TEMP_URL)
            logger.debug("Temporary URL consumed", url=url)
        return url

    # Push token

    def save_push_token(self, token: str) -> None:
        self.storage.set(Key.PUSH_TOKEN, token)

    def retrieve_push_token(self) -> Optional[str]:
        return self.storage.get(Key.PUSH_TOKEN) or None
