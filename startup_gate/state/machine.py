"""
Core startup state machine logic.

``evaluate`` is the pure transition table; ``StateEngine`` applies it to a
single current phase, keeps the transition history and locks itself once a
terminal phase (ACTIVE or IDLE) is reached.
"""

import threading
from typing import Callable, Optional

from ..contracts import CheckpointValidator
from ..errors import ValidationDeniedError
from ..logging.config import get_gating_logger, get_state_logger, log_gate_decision, log_state_transition
from .models import Phase, PhaseKind, TransitionRecord, Trigger, TriggerKind

state_logger = get_state_logger(__name__)
gating_logger = get_gating_logger(__name__)

PhaseListener = Callable[[Phase], None]


def evaluate(phase: Phase, trigger: Trigger) -> Optional[Phase]:
    """
    Compute the next phase for ``trigger`` applied in ``phase``.

    Args:
        phase: Current phase
        trigger: Incoming trigger

    Returns:
        The next phase, or None when the pair is not in the transition table
    """
    if phase.is_terminal:
        return None

    kind = phase.kind
    event = trigger.kind

    if kind == PhaseKind.INITIAL and event == TriggerKind.APP_LAUNCHED:
        return Phase.preparing()

    if kind == PhaseKind.PREPARING and event == TriggerKind.DATA_ARRIVED:
        return Phase.checking()

    if kind == PhaseKind.CHECKING and event == TriggerKind.CHECK_PASSED:
        return Phase.validated()

    if kind == PhaseKind.CHECKING and event == TriggerKind.CHECK_FAILED:
        return Phase.idle()

    if kind == PhaseKind.VALIDATED and event == TriggerKind.URL_RESOLVED:
        if trigger.url is None:
            return None
        return Phase.active(trigger.url)

    # Pre-empts whatever sub-sequence is in progress
    if event == TriggerKind.NETWORK_DOWN:
        return Phase.no_connection()

    if kind == PhaseKind.NO_CONNECTION and event == TriggerKind.NETWORK_UP:
        return Phase.idle()

    if event == TriggerKind.TIMED_OUT:
        return Phase.idle()

    return None


class StateEngine:
    """Single authoritative phase tracker for app boot."""

    def __init__(self, validator: CheckpointValidator):
        self.logger = state_logger
        self.validator = validator
        self._lock = threading.Lock()
        self._current = Phase.initial()
        self._history: list[TransitionRecord] = []
        self._locked = False
        self._listeners: list[PhaseListener] = []

    @property
    def current(self) -> Phase:
        return self._current

    @property
    def history(self) -> list[TransitionRecord]:
        with self._lock:
            return list(self._history)

    @property
    def is_locked(self) -> bool:
        return self._locked

    def subscribe(self, listener: PhaseListener) -> None:
        """Register a listener called with each newly entered phase."""
        self._listeners.append(listener)

    def fire(self, trigger: Trigger) -> bool:
        """
        Apply a trigger to the current phase.

        Returns:
            True if the trigger caused a transition, False if it was rejected
            or the engine is locked
        """
        with self._lock:
            if self._locked:
                self.logger.debug(
                    "Trigger discarded, engine locked",
                    trigger=str(trigger),
                    phase=str(self._current)
                )
                return False

            next_phase = evaluate(self._current, trigger)
            if next_phase is None:
                self.logger.debug(
                    "Trigger rejected",
                    trigger=str(trigger),
                    phase=str(self._current)
                )
                return False

            record = TransitionRecord(
                from_phase=self._current,
                to_phase=next_phase,
                trigger=trigger
            )
            self._history.append(record)
            self._current = next_phase

            if next_phase.is_terminal:
                self._locked = True

        log_state_transition(
            self.logger,
            from_state=str(record.from_phase),
            to_state=str(record.to_phase),
            trigger=trigger.kind.value,
            context={"locked": self._locked, "timestamp": record.timestamp.isoformat()}
        )

        for listener in list(self._listeners):
            listener(next_phase)

        return True

    async def perform_validation(self) -> None:
        """
        Run the checkpoint validator and fire the matching trigger.

        Raises:
            ValidationDeniedError: The check answered "disabled"
            CheckpointError: Propagated unchanged from the validator
        """
        passed = await self.validator.check()

        log_gate_decision(
            gating_logger,
            gate_name="checkpoint",
            passed=passed,
            reason="remote checkpoint enabled" if passed else "remote checkpoint disabled"
        )

        if passed:
            self.fire(Trigger.check_passed())
        else:
            self.fire(Trigger.check_failed())
            raise ValidationDeniedError("Checkpoint denied")
