import sqlite3
import time
from dataclasses import dataclass, field
from typing import Any


@dataclass
class MountedFolder:
    path: str


@dataclass
class MountedPage:
    url: str
    title: str
    content: str
    fetched_at: str

    def to_dict(self) -> dict[str, str]:
        return {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "fetchedAt": self.fetched_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "MountedPage":
        def text(key: str) -> str:
            value = raw.get(key)
            return value if isinstance(value, str) else ""

        return cls(
            url=raw["url"],
            title=text("title"),
            content=text("content"),
            fetched_at=text("fetchedAt"),
        )


@dataclass
class MountedDatabase:
    path: str
    handle: sqlite3.Connection = field(repr=False)


class Status:
    ADDED = "added"
    ALREADY_MOUNTED = "already_mounted"
    REMOVED = "removed"
    NOT_MOUNTED = "not_mounted"
    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    NOT_A_FILE = "not_a_file"
    FETCH_ERROR = "fetch_error"
    OPEN_ERROR = "open_error"
    ROWS = "rows"
    REJECTED_STATEMENT = "rejected_statement"
    QUERY_ERROR = "query_error"


SUCCESS = {Status.ADDED, Status.REMOVED, Status.ROWS}


@dataclass
class Outcome:
    """Structured result of a registry operation. Never raised, always returned."""

    status: str
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in SUCCESS


@dataclass
class TraceEvent:
    op: str
    payload: dict[str, Any]
    t: float = field(default_factory=time.time)


class Traced:
    """Keeps an append-only trace of what an object did, for later inspection."""

    def __init__(self):
        self.trace: list[TraceEvent] = []

    def log(self, op, **payload):
        self.trace.append(TraceEvent(op, payload))

    def explain_trace(self):
        for ev in self.trace:
            print(ev.op, ev.payload)


# ---------- resource identifiers ----------
@dataclass(frozen=True)
class FileResource:
    path: str

    @property
    def uri(self) -> str:
        return f"file:///{self.path.lstrip('/')}"


@dataclass(frozen=True)
class PageResource:
    url: str

    @property
    def uri(self) -> str:
        return f"web:///{self.url}"


@dataclass(frozen=True)
class SchemaResource:
    path: str

    @property
    def uri(self) -> str:
        return f"sqlite:///{self.path.lstrip('/')}"


Resource = FileResource | PageResource | SchemaResource


@dataclass
class ResourceInfo:
    uri: str
    name: str
    description: str
    mime_type: str


@dataclass
class ResourceContent:
    uri: str
    mime_type: str
    text: str
