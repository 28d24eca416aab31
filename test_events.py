import asyncio

import pytest

from omni_mount import events
from omni_mount.events import EventBus


def test_subscribers_receive_events_in_order():
    bus = EventBus()
    seen = []
    bus.subscribe(lambda ev: seen.append((ev.kind, ev.payload)))

    bus.server_online()
    bus.resource_read("a.md")
    bus.folders_changed(["/docs"])
    bus.pages_changed([{"url": "https://example.com", "title": "Example"}])
    bus.databases_changed(["/data.db"])

    assert seen == [
        (events.ONLINE, None),
        (events.RESOURCE_READ, "a.md"),
        (events.FOLDERS_CHANGED, ["/docs"]),
        (events.PAGES_CHANGED, [{"url": "https://example.com", "title": "Example"}]),
        (events.DATABASES_CHANGED, ["/data.db"]),
    ]


def test_late_subscriber_gets_no_replay():
    bus = EventBus()
    bus.server_online()

    seen = []
    bus.subscribe(seen.append)
    bus.resource_read("b.txt")

    assert [ev.kind for ev in seen] == [events.RESOURCE_READ]


def test_snapshot_payloads_are_copies():
    bus = EventBus()
    seen = []
    bus.subscribe(seen.append)
    paths = ["/one"]

    bus.folders_changed(paths)
    paths.append("/two")

    assert seen[0].payload == ["/one"]


def test_failing_subscriber_does_not_break_emit_or_others():
    bus = EventBus()
    seen = []

    def broken(ev):
        raise RuntimeError("observer crashed")

    bus.subscribe(broken)
    bus.subscribe(seen.append)

    bus.resource_read("a.md")

    assert len(seen) == 1
    assert bus.errors == 1
    assert bus.trace[-1].op == "subscriber_error"
    assert bus.trace[-1].payload["error"] == "observer crashed"


def test_unsubscribe_stops_delivery():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe(seen.append)

    bus.server_online()
    unsubscribe()
    bus.server_online()

    assert len(seen) == 1


def test_bounded_queue_drops_when_full():
    async def scenario():
        bus = EventBus()
        q = bus.queue(maxsize=2)
        for name in ("a", "b", "c"):
            bus.resource_read(name)
        drained = [q.get_nowait().payload for _ in range(q.qsize())]
        return bus, drained

    bus, drained = asyncio.run(scenario())

    assert drained == ["a", "b"]
    assert bus.dropped == 1


def test_unknown_kind_and_bad_subscriber_are_rejected():
    bus = EventBus()
    with pytest.raises(ValueError):
        bus.emit("mount:exploded")
    with pytest.raises(TypeError):
        bus.subscribe("not callable")
