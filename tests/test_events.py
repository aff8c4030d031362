import logging

import pytest
from nodelogger.events import (
    EVT_ANY,
    EVT_NODES_ADDED,
    EVT_NOTICE,
    EVT_SAVED,
    EventBus,
    NodeEvent,
)
from nodelogger.grid import GridCoordinate as G

def test_emit_reaches_key_and_wildcard_subscribers():
    bus = EventBus()
    keyed, wild = [], []
    bus.subscribe(EVT_NODES_ADDED, keyed.append)
    bus.subscribe("*", wild.append)

    bus.emit(NodeEvent(event_key=EVT_NODES_ADDED, cells=[G(1, 2, 3)]))
    bus.notify("hello")

    assert [e.cells for e in keyed] == [[G(1, 2, 3)]]
    assert [e.event_key for e in wild] == [EVT_NODES_ADDED, EVT_NOTICE]
    assert wild[1].message == "hello"

def test_unsubscribe():
    bus = EventBus()
    seen = []
    bus.subscribe(EVT_NOTICE, seen.append)
    bus.unsubscribe(EVT_NOTICE, seen.append)
    bus.notify("ignored")
    assert seen == []

def test_failing_handler_does_not_stop_emission(caplog):
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(EVT_NOTICE, broken)
    bus.subscribe(EVT_NOTICE, seen.append)
    with caplog.at_level(logging.ERROR, logger="nodelogger.events"):
        bus.notify("still delivered")

    assert [e.message for e in seen] == ["still delivered"]
    assert "Handler error" in caplog.text

def test_subscription_handle_detaches_bound_method():
    bus = EventBus()
    seen = []
    detach = bus.subscribe(EVT_NOTICE, seen.append)
    bus.notify("first")
    detach()
    bus.notify("second")
    assert [e.message for e in seen] == ["first"]

def test_publish_builds_envelope():
    bus = EventBus()
    seen = []
    bus.subscribe_many({EVT_NODES_ADDED: seen.append, EVT_SAVED: seen.append})
    event = bus.publish(EVT_SAVED, count=3)
    bus.publish(EVT_NODES_ADDED, cells=[G(0, 0, 1)])
    assert event.count == 3
    assert [e.event_key for e in seen] == [EVT_SAVED, EVT_NODES_ADDED]

@pytest.mark.parametrize("key", ["nodes.add", "", "session.notices"])
def test_unknown_event_keys_are_rejected(key):
    bus = EventBus()
    with pytest.raises(ValueError):
        bus.subscribe(key, lambda e: None)
    with pytest.raises(ValueError):
        bus.publish(key)

def test_wildcard_cannot_be_published():
    with pytest.raises(ValueError):
        EventBus().publish(EVT_ANY)
