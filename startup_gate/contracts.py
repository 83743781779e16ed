"""
Interfaces of the collaborators the startup sequence depends on.

Concrete implementations live in ``network``, ``store`` and
``connectivity``; tests substitute fakes.
"""

from typing import Any, Callable, Protocol

AttributionRecord = dict[str, Any]


class CheckpointValidator(Protocol):
    """Remote boolean kill switch."""

    async def check(self) -> bool:
        """Return True when the remote pathway is enabled.

        May raise ``CheckpointUnavailableError``.
        """
        ...


class NetworkFacade(Protocol):
    """Attribution lookup and destination resolution."""

    async def fetch_attribution(self, device_id: str) -> AttributionRecord:
        ...

    async def resolve_destination(self, attribution: AttributionRecord) -> str:
        ...


class ConnectivityMonitor(Protocol):
    """Reports connected (True) / disconnected (False) transitions."""

    def begin(self, callback: Callable[[bool], None]) -> None:
        ...

    def end(self) -> None:
        ...


class PermissionRequester(Protocol):
    """Platform notification permission prompt."""

    async def request_authorization(self) -> bool:
        """Prompt the user; True when notifications were authorized.

        Platform failures are raised as ``PermissionRequestError``.
        """
        ...

    def register_for_remote_notifications(self) -> None:
        ...
