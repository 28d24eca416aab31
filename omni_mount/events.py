"""
In-process notification bus between the registry/resolver and observers.

Events:
  server:online       transport connected (no payload)
  resource:read       the agent read something (payload: short label)
  folders:changed     folder mounts changed (payload: list of paths)
  pages:changed       page mounts changed (payload: list of {url, title})
  databases:changed   database mounts changed (payload: list of paths)

Emission never blocks and never raises on behalf of a subscriber: callback
errors are counted and traced, and bounded queues drop events when full.
"""
import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .core import Traced

ONLINE = "server:online"
RESOURCE_READ = "resource:read"
FOLDERS_CHANGED = "folders:changed"
PAGES_CHANGED = "pages:changed"
DATABASES_CHANGED = "databases:changed"

KINDS = (ONLINE, RESOURCE_READ, FOLDERS_CHANGED, PAGES_CHANGED, DATABASES_CHANGED)


@dataclass
class Event:
    kind: str
    payload: Any = None
    t: float = field(default_factory=time.time)


class EventBus(Traced):
    def __init__(self):
        super().__init__()
        self._subscribers: list[Callable[[Event], Any]] = []
        self._queues: list[asyncio.Queue] = []
        self.errors = 0
        self.dropped = 0

    def subscribe(self, fn: Callable[[Event], Any]) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        if not callable(fn):
            raise TypeError("Subscriber must be callable")
        self._subscribers.append(fn)

        def unsubscribe():
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return unsubscribe

    def queue(self, maxsize: int = 100) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._queues.append(q)
        return q

    def emit(self, kind: str, payload: Any = None) -> Event:
        if kind not in KINDS:
            raise ValueError(f"Unknown event kind: {kind}")
        event = Event(kind, payload)
        for fn in list(self._subscribers):
            try:
                fn(event)
            except Exception as e:
                self.errors += 1
                self.log("subscriber_error", kind=kind, error=str(e))
        for q in list(self._queues):
            try:
                q.put_nowait(event)
            except asyncio.QueueFull:
                self.dropped += 1
                self.log("dropped", kind=kind, maxsize=q.maxsize)
        return event

    # ---------- typed helpers ----------
    def server_online(self) -> Event:
        return self.emit(ONLINE)

    def resource_read(self, label: str) -> Event:
        return self.emit(RESOURCE_READ, label)

    def folders_changed(self, paths: list[str]) -> Event:
        return self.emit(FOLDERS_CHANGED, list(paths))

    def pages_changed(self, pages: list[dict[str, str]]) -> Event:
        return self.emit(PAGES_CHANGED, [dict(p) for p in pages])

    def databases_changed(self, paths: list[str]) -> Event:
        return self.emit(DATABASES_CHANGED, list(paths))
