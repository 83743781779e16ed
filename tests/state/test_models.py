"""Tests for phase and trigger models."""

from datetime import timezone

import pytest

from startup_gate.state.models import (
    TERMINAL_PHASES,
    Phase,
    PhaseKind,
    TransitionRecord,
    Trigger,
    TriggerKind,
)


class TestPhase:

    def test_only_active_and_idle_are_terminal(self):
        assert TERMINAL_PHASES == {PhaseKind.ACTIVE, PhaseKind.IDLE}
        assert Phase.active("https://a.example").is_terminal
        assert Phase.idle().is_terminal
        for phase in (Phase.initial(), Phase.preparing(), Phase.checking(),
                      Phase.validated(), Phase.no_connection()):
            assert not phase.is_terminal

    def test_active_carries_destination(self):
        phase = Phase.active("https://a.example")
        assert phase.destination == "https://a.example"
        assert str(phase) == "active(https://a.example)"
        assert Phase.idle().destination is None

    def test_phases_compare_by_value(self):
        assert Phase.active("https://a.example") == Phase.active("https://a.example")
        assert Phase.active("https://a.example") != Phase.active("https://b.example")

    def test_frozen(self):
        with pytest.raises(AttributeError):
            Phase.idle().kind = PhaseKind.ACTIVE


class TestTrigger:

    def test_url_only_on_url_resolved(self):
        assert Trigger.url_resolved("https://a.example").url == "https://a.example"
        assert Trigger.timed_out().url is None
        assert str(Trigger.url_resolved("x")) == "url_resolved(x)"
        assert str(Trigger.network_down()) == "network_down"

    def test_kinds_serialize_as_strings(self):
        assert TriggerKind.CHECK_FAILED.value == "check_failed"
        assert PhaseKind.NO_CONNECTION == "no_connection"


class TestTransitionRecord:

    def test_timestamp_defaults_to_utc_now(self):
        record = TransitionRecord(Phase.initial(), Phase.preparing(), Trigger.app_launched())
        assert record.timestamp.tzinfo == timezone.utc
