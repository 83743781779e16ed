"""
Application lifecycle wiring.

Builds the startup components from settings and connects them:

    SDK callbacks → AttributionChannel → EventConsolidator → EventBus
        → ApplicationOrchestrator (on its event loop)

Platform code calls the ``on_*`` hooks from whatever thread it runs on;
bus events are marshalled onto the orchestrator's loop.
"""

import asyncio
import threading
from typing import Any, Callable, Optional

import structlog

from .config.defaults import Settings
from .connectivity import SocketConnectivityMonitor
from .contracts import CheckpointValidator, ConnectivityMonitor, NetworkFacade, PermissionRequester
from .events.bus import EventBus, Topic
from .events.channel import AttributionChannel
from .events.consolidator import EventConsolidator
from .logging.config import configure_from_params
from .network.checkpoint import RealtimeDatabaseCheckpoint
from .network.http import JsonHttpClient
from .network.remote import RemoteNetworkFacade
from .orchestrator import ApplicationOrchestrator
from .push import MessageAdapter
from .state.machine import StateEngine
from .store.data_facade import LocalDataFacade
from .store.kv_store import KeyValueStore, SQLiteKeyValueStore

logger = structlog.get_logger(__name__)


class LifecycleAdapter:
    """Entry points the host platform calls during app launch."""

    def __init__(
        self,
        orchestrator: ApplicationOrchestrator,
        consolidator: EventConsolidator,
        channel: AttributionChannel,
        bus: EventBus,
        messages: MessageAdapter,
        data: LocalDataFacade
    ):
        self.orchestrator = orchestrator
        self.consolidator = consolidator
        self.channel = channel
        self.bus = bus
        self.messages = messages
        self.data = data
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_lock = threading.Lock()
        self._pending: list[tuple[Callable[..., None], tuple[Any, ...]]] = []

        # Subscribed before any SDK callback can land; events held until launch
        self._unsubscribers: list[Callable[[], None]] = [
            self.bus.subscribe(
                Topic.CONVERSION_CONSOLIDATED,
                lambda payload: self._call_on_loop(self.orchestrator.process_attribution, payload)
            ),
            self.bus.subscribe(
                Topic.DEEPLINK_OBSERVED,
                lambda payload: self._call_on_loop(self.orchestrator.process_deeplink, payload)
            ),
        ]

        self.channel.connect(
            on_conversion=consolidator.submit_conversion,
            on_deeplink=consolidator.submit_deeplink
        )

    @classmethod
    def create(
        cls,
        settings: Settings,
        permissions: PermissionRequester,
        device_id_provider: Callable[[], str],
        storage: Optional[KeyValueStore] = None,
        validator: Optional[CheckpointValidator] = None,
        network: Optional[NetworkFacade] = None,
        connectivity: Optional[ConnectivityMonitor] = None
    ) -> "LifecycleAdapter":
        """Build every component, using real implementations where none is given."""
        configure_from_params(settings.logging)

        storage = storage or SQLiteKeyValueStore(settings.storage.database_path)
        data = LocalDataFacade(storage)
        client = JsonHttpClient(
            timeout_seconds=settings.timing.http_timeout,
            user_agent=settings.platform.user_agent
        )

        validator = validator or RealtimeDatabaseCheckpoint(
            settings.endpoints.checkpoint_database_url,
            settings.endpoints.checkpoint_path,
            client
        )
        network = network or RemoteNetworkFacade(
            settings.endpoints,
            settings.platform,
            client,
            device_id_provider=device_id_provider,
            push_token_provider=data.retrieve_push_token
        )
        connectivity = connectivity or SocketConnectivityMonitor(
            settings.endpoints.connectivity_host,
            settings.endpoints.connectivity_port,
            interval_seconds=settings.timing.connectivity_interval
        )

        bus = EventBus()
        orchestrator = ApplicationOrchestrator(
            engine=StateEngine(validator),
            data=data,
            network=network,
            connectivity=connectivity,
            permissions=permissions,
            device_id_provider=device_id_provider,
            timing=settings.timing
        )
        consolidator = EventConsolidator(bus, data, window_seconds=settings.timing.consolidation_window)
        messages = MessageAdapter(data, bus, delay_seconds=settings.timing.temporary_url_delay)

        return cls(orchestrator, consolidator, AttributionChannel(), bus, messages, data)

    def on_launch(self, launch_payload: Optional[dict[Any, Any]] = None) -> None:
        """Start the orchestrator; must be called on its event loop."""
        self.orchestrator.start()

        with self._loop_lock:
            self._loop = asyncio.get_running_loop()
            pending, self._pending = self._pending, []

        for fn, args in pending:
            fn(*args)

        if launch_payload:
            self.messages.process(launch_payload)

        logger.info("Launch handled", launch_payload=bool(launch_payload))

    def on_notification(self, payload: dict[Any, Any]) -> None:
        self.messages.process(payload)

    def on_push_token(self, token: str) -> None:
        self.data.save_push_token(token)
        logger.info("Push token stored")

    async def shutdown(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.consolidator.cancel()
        self.messages.cancel()
        await self.orchestrator.shutdown()

    def _call_on_loop(self, fn: Callable[..., None], *args: Any) -> None:
        with self._loop_lock:
            loop = self._loop
            if loop is None:
                logger.info("Event received before launch, held", handler=fn.__name__)
                self._pending.append((fn, args))
                return
        loop.call_soon_threadsafe(fn, *args)
