import pytest

from delve.dungeon.events import EventBusDispatcher, NullDispatcher
from delve.dungeon.map import Point
from delve.dungeon.tiles import CellType
from delve.events import EventBus, EventType


def test_publish_reaches_subscribers_in_order():
    bus = EventBus()
    seen = []
    bus.subscribe("x", lambda e: seen.append(("a", e.payload["n"])))
    bus.subscribe("x", lambda e: seen.append(("b", e.payload["n"])))
    bus.publish("x", {"n": 1})
    assert seen == [("a", 1), ("b", 1)]


def test_unsubscribe_and_count():
    bus = EventBus()
    seen = []
    cb = seen.append
    bus.subscribe("x", cb)
    assert bus.subscriber_count("x") == 1
    bus.unsubscribe("x", cb)
    bus.publish("x", {})
    assert seen == []
    assert bus.subscriber_count("x") == 0


def test_failing_subscriber_does_not_stop_delivery():
    bus = EventBus()
    seen = []

    def bad(event):
        raise RuntimeError("boom")

    bus.subscribe("x", bad)
    bus.subscribe("x", seen.append)
    bus.publish("x", {"ok": True})
    assert len(seen) == 1


def test_subscribe_requires_callable():
    with pytest.raises(TypeError):
        EventBus().subscribe("x", "not callable")


def test_bus_dispatcher_payload():
    bus = EventBus()
    seen = []
    bus.subscribe(EventType.CELL_TRIGGERED, seen.append)
    EventBusDispatcher(bus, lambda: 4).dispatch(Point(3, 9), CellType.SPRING)
    assert seen[0].name == EventType.CELL_TRIGGERED
    assert seen[0].payload == {"x": 3, "y": 9, "cell_type": "spring", "floor": 4}


def test_null_dispatcher_accepts_anything():
    NullDispatcher().dispatch(Point(0, 0), CellType.ENEMY)
