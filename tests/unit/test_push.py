"""Tests for push payload handling."""

import threading

import pytest

from startup_gate.events.bus import EventBus, Topic
from startup_gate.push import MessageAdapter, extract_url


class TestExtractUrl:

    def test_top_level_url(self):
        assert extract_url({"url": "https://push.example/a"}) == "https://push.example/a"

    def test_nested_data_url(self):
        assert extract_url({"data": {"url": "https://push.example/b"}}) == "https://push.example/b"

    @pytest.mark.parametrize("payload", [
        {},
        {"url": 5},
        {"data": "https://push.example"},
        {"data": {"link": "https://push.example"}},
        {"aps": {"alert": "hi"}},
    ])
    def test_other_shapes_ignored(self, payload):
        assert extract_url(payload) is None


class TestMessageAdapter:

    def test_stores_and_announces_after_delay(self, data_facade):
        bus = EventBus()
        announced = []
        ready = threading.Event()

        def on_ready(payload):
            announced.append(payload)
            ready.set()

        bus.subscribe(Topic.TEMPORARY_URL_READY, on_ready)
        adapter = MessageAdapter(data_facade, bus, delay_seconds=0.05)

        assert adapter.process({"data": {"url": "https://push.example"}}) == "https://push.example"
        assert data_facade.peek_temporary_url() == "https://push.example"
        assert announced == []

        assert ready.wait(1.0)
        assert announced == [{"temp_url": "https://push.example"}]

    def test_payload_without_url_is_ignored(self, data_facade):
        bus = EventBus()
        announced = []
        bus.subscribe(Topic.TEMPORARY_URL_READY, announced.append)
        adapter = MessageAdapter(data_facade, bus, delay_seconds=0.01)

        assert adapter.process({"aps": {}}) is None
        assert data_facade.peek_temporary_url() is None

    def test_cancel_suppresses_announcement(self, data_facade):
        bus = EventBus()
        announced = []
        bus.subscribe(Topic.TEMPORARY_URL_READY, announced.append)
        adapter = MessageAdapter(data_facade, bus, delay_seconds=0.05)

        adapter.process({"url": "https://push.example"})
        adapter.cancel()
        threading.Event().wait(0.15)

        assert announced == []
        assert data_facade.peek_temporary_url() == "https://push.example"
