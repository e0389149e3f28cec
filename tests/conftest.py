# tests/conftest.py

import pytest

from power_budget.config import AllocatorConfig
from power_budget.core.allocator import PowerAllocator
from power_budget.core.event_bus import ALL_EVENTS, EventBus


@pytest.fixture
def config():
    """Limits of the three-device session: 92 of 100 usable, 40 per device."""
    return AllocatorConfig(max_capacity=100, safety_limit=92, device_max_power=40)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def events(bus):
    """Every event published on ``bus``, in order, as (type, data) pairs."""
    recorded = []

    def record(event):
        recorded.append((event["type"], event["data"]))

    bus.subscribe(ALL_EVENTS, record)
    return recorded


@pytest.fixture
def allocator(config, bus):
    return PowerAllocator(config, event_bus=bus)


@pytest.fixture
def check_invariants():
    """Checks that hold after any connect, disconnect or redistribution."""

    def check(alloc):
        total = sum(c.allocated for c in alloc)
        assert alloc.total_used == pytest.approx(total)
        assert alloc.total_used <= alloc.config.safety_limit + 1e-9
        ids = [c.id for c in alloc]
        assert len(ids) == len(set(ids))
        for c in alloc:
            assert 0 <= c.allocated <= alloc.config.device_max_power

    return check
