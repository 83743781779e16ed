"""Pytest configuration and shared fixtures."""

from typing import Any

import pytest

from startup_gate.config.defaults import TimingParams
from startup_gate.store.data_facade import LocalDataFacade
from startup_gate.store.kv_store import MemoryKeyValueStore


@pytest.fixture
def fast_timing() -> TimingParams:
    """Timings shrunk so scenarios complete in well under a second."""
    return TimingParams(
        startup_timeout=0.5,
        consolidation_window=0.05,
        first_run_grace=0.05,
        permission_cooldown=259200.0,
        temporary_url_delay=0.05,
        connectivity_interval=0.05,
        http_timeout=1.0,
    )


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def data_facade(memory_store) -> LocalDataFacade:
    return LocalDataFacade(memory_store)


@pytest.fixture
def organic_attribution() -> dict[str, Any]:
    return {"af_status": "Organic", "install_time": "2026-10-19 08:00:00"}


@pytest.fixture
def paid_attribution() -> dict[str, Any]:
    return {
        "af_status": "Non-organic",
        "media_source": "test_network",
        "campaign": "autumn_launch",
    }
