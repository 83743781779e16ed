"""
State machine data models for the startup lifecycle.

This module defines immutable data structures for boot phases, the triggers
that move between them, and the diagnostic transition history.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class PhaseKind(str, Enum):
    """Boot phases."""
    INITIAL = "initial"
    PREPARING = "preparing"
    CHECKING = "checking"
    VALIDATED = "validated"
    ACTIVE = "active"
    IDLE = "idle"
    NO_CONNECTION = "no_connection"


TERMINAL_PHASES = frozenset({PhaseKind.ACTIVE, PhaseKind.IDLE})


class TriggerKind(str, Enum):
    """Events that drive phase transitions."""
    APP_LAUNCHED = "app_launched"
    DATA_ARRIVED = "data_arrived"
    CHECK_PASSED = "check_passed"
    CHECK_FAILED = "check_failed"
    URL_RESOLVED = "url_resolved"
    NETWORK_DOWN = "network_down"
    NETWORK_UP = "network_up"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class Phase:
    """Current boot phase; ``destination`` is only set for ACTIVE."""

    kind: PhaseKind
    destination: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_PHASES

    def __str__(self) -> str:
        if self.kind == PhaseKind.ACTIVE:
            return f"{self.kind.value}({self.destination})"
        return self.kind.value

    @classmethod
    def initial(cls) -> 'Phase':
        return cls(PhaseKind.INITIAL)

    @classmethod
    def preparing(cls) -> 'Phase':
        return cls(PhaseKind.PREPARING)

    @classmethod
    def checking(cls) -> 'Phase':
        return cls(PhaseKind.CHECKING)

    @classmethod
    def validated(cls) -> 'Phase':
        return cls(PhaseKind.VALIDATED)

    @classmethod
    def active(cls, destination: str) -> 'Phase':
        return cls(PhaseKind.ACTIVE, destination)

    @classmethod
    def idle(cls) -> 'Phase':
        return cls(PhaseKind.IDLE)

    @classmethod
    def no_connection(cls) -> 'Phase':
        return cls(PhaseKind.NO_CONNECTION)


@dataclass(frozen=True)
class Trigger:
    """A transition event; ``url`` is only set for URL_RESOLVED."""

    kind: TriggerKind
    url: Optional[str] = None

    def __str__(self) -> str:
        if self.kind == TriggerKind.URL_RESOLVED:
            return f"{self.kind.value}({self.url})"
        return self.kind.value

    @classmethod
    def app_launched(cls) -> 'Trigger':
        return cls(TriggerKind.APP_LAUNCHED)

    @classmethod
    def data_arrived(cls) -> 'Trigger':
        return cls(TriggerKind.DATA_ARRIVED)

    @classmethod
    def check_passed(cls) -> 'Trigger':
        return cls(TriggerKind.CHECK_PASSED)

    @classmethod
    def check_failed(cls) -> 'Trigger':
        return cls(TriggerKind.CHECK_FAILED)

    @classmethod
    def url_resolved(cls, url: str) -> 'Trigger':
        return cls(TriggerKind.URL_RESOLVED, url)

    @classmethod
    def network_down(cls) -> 'Trigger':
        return cls(TriggerKind.NETWORK_DOWN)

    @classmethod
    def network_up(cls) -> 'Trigger':
        return cls(TriggerKind.NETWORK_UP)

    @classmethod
    def timed_out(cls) -> 'Trigger':
        return cls(TriggerKind.TIMED_OUT)


@dataclass(frozen=True)
class TransitionRecord:
    """One accepted transition. Kept for diagnostics only, never replayed."""

    from_phase: Phase
    to_phase: Phase
    trigger: Trigger
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
