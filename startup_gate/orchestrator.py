"""
Application orchestrator.

Drives the startup state machine from launch to a terminal phase:

    launch → attribution arrives → checkpoint → destination resolution

A timeout watchdog and a connectivity monitor run alongside the sequence and
can pre-empt it at any suspension point. Whatever reaches the state machine
first wins; once it is locked, late results are dropped by the machine
itself. All failures end up as CHECK_FAILED or TIMED_OUT triggers, never as
exceptions seen by the presentation layer.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

import structlog

from .config.defaults import TimingParams
from .contracts import AttributionRecord, ConnectivityMonitor, NetworkFacade, PermissionRequester
from .errors import PermissionRequestError, ValidationDeniedError
from .events.consolidator import merge_attribution
from .logging.config import get_gating_logger, log_gate_decision
from .state.machine import StateEngine
from .state.models import Phase, PhaseKind, Trigger
from .store.data_facade import AppMode, LocalDataFacade

logger = structlog.get_logger(__name__)
gating_logger = get_gating_logger(__name__)

ORGANIC_STATUS = "Organic"
ATTRIBUTION_STATUS_KEY = "af_status"


class ViewMode(str, Enum):
    """What the presentation layer should show."""
    LOADING = "loading"
    RUNNING = "running"
    STANDBY = "standby"
    OFFLINE = "offline"


@dataclass(frozen=True)
class ViewSelection:
    mode: ViewMode
    destination: Optional[str] = None


def view_for_phase(phase: Phase) -> ViewSelection:
    """Map a boot phase to the screen that represents it."""
    if phase.kind == PhaseKind.ACTIVE:
        return ViewSelection(ViewMode.RUNNING, phase.destination)
    if phase.kind == PhaseKind.IDLE:
        return ViewSelection(ViewMode.STANDBY)
    if phase.kind == PhaseKind.NO_CONNECTION:
        return ViewSelection(ViewMode.OFFLINE)
    return ViewSelection(ViewMode.LOADING)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApplicationOrchestrator:
    """Sequences the startup decision on top of a StateEngine."""

    def __init__(
        self,
        engine: StateEngine,
        data: LocalDataFacade,
        network: NetworkFacade,
        connectivity: ConnectivityMonitor,
        permissions: PermissionRequester,
        device_id_provider: Callable[[], str],
        timing: Optional[TimingParams] = None,
        clock: Callable[[], datetime] = _utcnow
    ) -> None:
        self.logger = logger
        self.engine = engine
        self.data = data
        self.network = network
        self.connectivity = connectivity
        self.permissions = permissions
        self.device_id_provider = device_id_provider
        self.timing = timing or TimingParams()
        self.clock = clock

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timeout_task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()
        self._started = False

        self._view = view_for_phase(engine.current)
        self._presentation_locked = False
        self._view_listeners: list[Callable[[ViewSelection], None]] = []

        self._gate_open = False
        self._gate_listeners: list[Callable[[bool], None]] = []

        self.engine.subscribe(self._handle_phase_change)

    # Presentation surface

    @property
    def view_selection(self) -> ViewSelection:
        return self._view

    @property
    def permission_gate_open(self) -> bool:
        return self._gate_open

    def subscribe(self, listener: Callable[[ViewSelection], None]) -> None:
        self._view_listeners.append(listener)

    def subscribe_permission_gate(self, listener: Callable[[bool], None]) -> None:
        self._gate_listeners.append(listener)

    # Lifecycle

    def start(self) -> None:
        """Fire APP_LAUNCHED and start both watchdogs. Needs a running loop."""
        if self._started:
            return
        self._started = True
        self._loop = asyncio.get_running_loop()

        self.engine.fire(Trigger.app_launched())
        self._timeout_task = self._loop.create_task(self._timeout_watchdog())
        self.connectivity.begin(self._handle_connectivity)

        self.logger.info(
            "Startup sequence started",
            timeout_seconds=self.timing.startup_timeout
        )

    async def shutdown(self) -> None:
        """Cancel watchdogs and in-flight sequence steps."""
        self.connectivity.end()

        pending = [t for t in self._tasks if not t.done()]
        if self._timeout_task is not None and not self._timeout_task.done():
            pending.append(self._timeout_task)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        self.logger.info("Orchestrator shut down", phase=str(self.engine.current))

    def process_attribution(self, payload: AttributionRecord) -> None:
        """Accept the consolidated attribution record and begin validation."""
        self.data.persist_attribution(payload)

        if not self.engine.fire(Trigger.data_arrived()):
            self.logger.info(
                "Attribution stored without validation",
                phase=str(self.engine.current)
            )
            return

        self._spawn(self._run_validation_sequence())

    def process_deeplink(self, payload: AttributionRecord) -> None:
        self.data.persist_deeplink(payload)

    # Permission gate

    def decline_permission(self) -> None:
        if not self._gate_open:
            self.logger.warning("Permission declined while gate closed")
            return

        self.data.record_permission_dismissal(self.clock())
        self._set_gate(False)

    async def accept_permission(self) -> bool:
        """Prompt for notification permission; returns whether it was granted."""
        if not self._gate_open:
            self.logger.warning("Permission accepted while gate closed")
            return False

        try:
            granted = await self.permissions.request_authorization()
        except PermissionRequestError as e:
            self.logger.warning("Permission request failed", error=str(e), context=e.context)
            granted = False

        self.data.save_permission_result(granted=granted, denied=not granted)

        if granted:
            self.permissions.register_for_remote_notifications()

        log_gate_decision(
            gating_logger,
            gate_name="notification_permission",
            passed=granted,
            reason="user granted" if granted else "user or platform denied"
        )

        self._set_gate(False)
        return granted

    # Watchdogs

    async def _timeout_watchdog(self) -> None:
        await asyncio.sleep(self.timing.startup_timeout)

        if self.engine.is_locked:
            return

        self.logger.warning(
            "Startup timed out",
            timeout_seconds=self.timing.startup_timeout,
            phase=str(self.engine.current)
        )
        self.engine.fire(Trigger.timed_out())

    def _handle_connectivity(self, connected: bool) -> None:
        if self._loop is not None and self._is_off_loop():
            self._loop.call_soon_threadsafe(self._handle_connectivity, connected)
            return

        if self.engine.is_locked:
            return

        self.engine.fire(Trigger.network_up() if connected else Trigger.network_down())

    def _is_off_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is not self._loop
        except RuntimeError:
            return True

    # Sequence

    async def _run_validation_sequence(self) -> None:
        try:
            await self.engine.perform_validation()
        except ValidationDeniedError:
            return
        except Exception as e:
            self.logger.warning(
                "Checkpoint unavailable, treating as failed",
                error=str(e),
                error_type=type(e).__name__
            )
            self.engine.fire(Trigger.check_failed())
            return

        if self.engine.current.kind != PhaseKind.VALIDATED:
            self.logger.info("Sequence pre-empted after validation", phase=str(self.engine.current))
            return

        await self._continue_sequence(allow_first_run=True)

    async def _continue_sequence(self, allow_first_run: bool) -> None:
        attribution = self.data.retrieve_attribution()

        if not attribution:
            self.logger.info("No attribution, using cached destination")
            self._load_cached_url()
            return

        if self.data.retrieve_mode() == AppMode.INACTIVE.value:
            self.logger.info("App mode is inactive")
            self.engine.fire(Trigger.timed_out())
            return

        # Re-entry after the organic re-fetch skips this branch
        if allow_first_run and self._should_run_first_run(attribution):
            await self._run_first_run_sequence()
            return

        temporary = self.data.peek_temporary_url()
        if temporary:
            self.logger.info("Using push-delivered destination", url=temporary)
            if self._activate(temporary):
                self.data.consume_temporary_url()
            return

        await self._resolve_destination()

    def _should_run_first_run(self, attribution: AttributionRecord) -> bool:
        return (
            self.data.is_first_run()
            and attribution.get(ATTRIBUTION_STATUS_KEY) == ORGANIC_STATUS
        )

    async def _run_first_run_sequence(self) -> None:
        self.logger.info("Organic first run, waiting for delayed attribution",
                         grace_seconds=self.timing.first_run_grace)
        await asyncio.sleep(self.timing.first_run_grace)

        if self.engine.is_locked:
            return

        device_id = self.device_id_provider()
        try:
            fetched = await self.network.fetch_attribution(device_id)
        except Exception as e:
            self.logger.warning(
                "Attribution re-fetch failed",
                error=str(e),
                error_type=type(e).__name__,
                device_id=device_id
            )
            self.engine.fire(Trigger.timed_out())
            return

        combined = merge_attribution(fetched, self.data.retrieve_deeplink())
        self.data.persist_attribution(combined)

        await self._continue_sequence(allow_first_run=False)

    async def _resolve_destination(self) -> None:
        if self.engine.is_locked:
            return

        try:
            url = await self.network.resolve_destination(self.data.retrieve_attribution())
        except Exception as e:
            self.logger.warning(
                "Destination resolution failed",
                error=str(e),
                error_type=type(e).__name__
            )
            self._load_cached_url()
            return

        self.data.cache_url(url)
        self.data.set_mode(AppMode.ACTIVE)
        self.data.mark_first_run_complete()

        self._activate(url)

    def _load_cached_url(self) -> None:
        cached = self.data.retrieve_cached_url()
        if cached:
            self._activate(cached)
        else:
            self.engine.fire(Trigger.timed_out())

    def _activate(self, url: str) -> bool:
        """Fire URL_RESOLVED; returns whether the machine accepted it."""
        if self.engine.is_locked:
            return False

        if not self.engine.fire(Trigger.url_resolved(url)):
            return False

        if self._should_show_permission_prompt():
            self._set_gate(True)
        return True

    def _should_show_permission_prompt(self) -> bool:
        if self.data.was_permission_granted() or self.data.was_permission_denied():
            log_gate_decision(gating_logger, "permission_prompt", False, "already answered")
            return False

        last_request = self.data.retrieve_last_permission_request()
        if last_request is not None:
            elapsed = (self.clock() - last_request).total_seconds()
            if elapsed < self.timing.permission_cooldown:
                log_gate_decision(
                    gating_logger, "permission_prompt", False, "prompted recently",
                    context={"elapsed_seconds": elapsed}
                )
                return False

        log_gate_decision(gating_logger, "permission_prompt", True, "prompt due")
        return True

    # Plumbing

    def _spawn(self, coro) -> asyncio.Task:
        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _cancel_timeout(self) -> None:
        task = self._timeout_task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    def _set_gate(self, is_open: bool) -> None:
        self._gate_open = is_open
        for listener in list(self._gate_listeners):
            listener(is_open)

    def _handle_phase_change(self, phase: Phase) -> None:
        if phase.is_terminal:
            self._cancel_timeout()

        if self._presentation_locked:
            return

        self._view = view_for_phase(phase)
        if self._view.mode == ViewMode.RUNNING:
            self._presentation_locked = True

        for listener in list(self._view_listeners):
            listener(self._view)
