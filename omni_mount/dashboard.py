import time
from collections import deque

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from . import events
from .banner import __version__, console as default_console
from .events import Event, EventBus
from .utils import shorten


class Dashboard:
    """
    Live status panel on stderr, fed only by bus events.

    On a terminal the panel is redrawn in place; otherwise each event is
    printed as one plain line so logs stay readable.
    """

    def __init__(
        self,
        bus: EventBus,
        folders: list[str] | None = None,
        pages: list[dict[str, str]] | None = None,
        databases: list[str] | None = None,
        console: Console | None = None,
        max_activity: int = 5,
    ):
        self.console = console or default_console
        self.online = False
        self.folders = list(folders or [])
        self.pages = list(pages or [])
        self.databases = list(databases or [])
        self.activity: deque[tuple[float, str]] = deque(maxlen=max_activity)
        self._live: Live | None = None
        self._unsubscribe = bus.subscribe(self.on_event)

    def start(self):
        if self.console.is_terminal:
            self._live = Live(self.render(), console=self.console, auto_refresh=False)
            self._live.start()
        else:
            self.console.print(self.render())

    def stop(self):
        self._unsubscribe()
        if self._live is not None:
            self._live.stop()
            self._live = None

    def on_event(self, event: Event):
        match event.kind:
            case events.ONLINE:
                self.online = True
            case events.RESOURCE_READ:
                self.activity.append((event.t, str(event.payload)))
            case events.FOLDERS_CHANGED:
                self.folders = list(event.payload)
            case events.PAGES_CHANGED:
                self.pages = list(event.payload)
            case events.DATABASES_CHANGED:
                self.databases = list(event.payload)

        if self._live is not None:
            self._live.update(self.render(), refresh=True)
        else:
            self.console.print(describe(event), markup=False, highlight=False)

    def render(self) -> Panel:
        lines: list[Text] = []
        status = "● Server Online" if self.online else "◌ Server Starting…"
        header = Text(status, style="bold green" if self.online else "bold yellow")
        header.append(f"  │ stdio transport │ v{__version__}", style="dim")
        lines += [header, Text("━" * 52, style="dim"), Text()]

        lines += self._section(f"📂 Folders ({len(self.folders)})",
                               [shorten(f, 45) for f in self.folders], "cyan")
        lines += self._section(
            f"🌐 Web Pages ({len(self.pages)})",
            [f"{shorten(p.get('title', ''), 25)} → {shorten(p.get('url', ''), 30)}" for p in self.pages],
            "magenta",
        )
        lines += self._section(f"🗄️  Databases ({len(self.databases)})",
                               [shorten(d, 45) for d in self.databases], "yellow")

        now = time.time()
        reads = [f"{label}  ({now - t:.0f}s ago)" for t, label in self.activity]
        lines += self._section("⚡ Live Activity", reads, "green", empty="(waiting for reads)")
        return Panel(Group(*lines), title="[bold cyan]Omni-MCP[/bold cyan]", border_style="cyan")

    def _section(self, title: str, items: list[str], style: str, empty: str = "(none)") -> list[Text]:
        out = [Text(title, style="bold")]
        if not items:
            out.append(Text(f"   {empty}", style="dim"))
        for i, item in enumerate(items):
            connector = "└──" if i == len(items) - 1 else "├──"
            out.append(Text(f"   {connector} {item}", style=style))
        out.append(Text())
        return out


def describe(event: Event) -> str:
    """One-line rendering of an event for non-terminal output."""
    match event.kind:
        case events.ONLINE:
            return "● server online"
        case events.RESOURCE_READ:
            return f"⚡ read {event.payload}"
        case events.FOLDERS_CHANGED:
            return f"📂 folders: {len(event.payload)} mounted"
        case events.PAGES_CHANGED:
            return f"🌐 pages: {len(event.payload)} mounted"
        case events.DATABASES_CHANGED:
            return f"🗄️  databases: {len(event.payload)} mounted"
    return event.kind
