# tests/core/test_event_bus.py

import logging

from power_budget.core.event_bus import ALL_EVENTS, EventBus


def test_event_bus_publish_subscribe():
    eb = EventBus()
    events = []

    def callback(event):
        events.append(event)

    eb.subscribe("test_event", callback)
    count = eb.publish("test_event", {"data": 123}, "unit")
    assert count == 1
    assert events == [{"type": "test_event", "data": {"data": 123}, "source": "unit"}]


def test_buses_are_independent():
    first, second = EventBus(), EventBus()
    seen = []
    first.subscribe("power_status", seen.append)
    second.publish("power_status", "ignored")
    assert seen == []


def test_unsubscribe():
    eb = EventBus()
    seen = []
    eb.subscribe("x", seen.append)
    assert eb.unsubscribe("x", seen.append)
    assert not eb.unsubscribe("x", seen.append)
    assert eb.publish("x") == 0
    assert seen == []


def test_failing_handler_does_not_stop_others(caplog):
    eb = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    eb.subscribe("x", broken)
    eb.subscribe("x", seen.append)
    assert eb.publish("x", 1) == 1
    assert len(seen) == 1
    assert "boom" in caplog.text


def test_clear():
    eb = EventBus()
    eb.subscribe("x", lambda event: None)
    eb.clear()
    assert eb.publish("x") == 0


def test_default_source_is_owner_name():
    eb = EventBus(source="bench")
    seen = []
    eb.subscribe("power_status", seen.append)
    eb.publish("power_status", 1)
    eb.publish("power_status", 2, "override")
    assert [e["source"] for e in seen] == ["bench", "override"]


def test_all_events_handlers_run_after_specific_ones():
    eb = EventBus()
    order = []
    eb.subscribe(ALL_EVENTS, lambda event: order.append(("all", event["type"])))
    eb.subscribe("consumer_connected", lambda event: order.append(("one", event["type"])))
    assert eb.publish("consumer_connected") == 2
    assert eb.publish("power_status") == 1
    assert order == [
        ("one", "consumer_connected"),
        ("all", "consumer_connected"),
        ("all", "power_status"),
    ]


def test_published_counts():
    eb = EventBus()
    eb.publish("power_status")
    eb.publish("power_status")
    eb.publish("consumer_connected")
    assert eb.published["power_status"] == 2
    assert eb.published["consumer_connected"] == 1
    eb.clear()
    assert eb.published["power_status"] == 0


def test_debug_mode_logs_events(caplog):
    caplog.set_level(logging.DEBUG, logger="power_budget.core.event_bus")
    eb = EventBus(source="bench")
    eb.publish("power_status", 1)
    assert "power_status" not in caplog.text
    eb.enable_debug()
    eb.publish("power_status", 2)
    assert "bench: power_status 2" in caplog.text
