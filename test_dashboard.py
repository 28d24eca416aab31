import io

from rich.console import Console

from omni_mount.dashboard import Dashboard, describe
from omni_mount.events import EventBus


def _console():
    return Console(file=io.StringIO(), width=100, color_system=None)


def _render(dashboard):
    console = _console()
    console.print(dashboard.render())
    return console.file.getvalue()


def test_events_update_dashboard_state():
    bus = EventBus()
    dashboard = Dashboard(bus, folders=["/docs"], console=_console())

    bus.server_online()
    bus.folders_changed(["/docs", "/notes"])
    bus.pages_changed([{"url": "https://example.com", "title": "Example Domain"}])
    bus.databases_changed(["/data/app.db"])
    bus.resource_read("a.md")

    assert dashboard.online is True
    assert dashboard.folders == ["/docs", "/notes"]
    assert dashboard.pages == [{"url": "https://example.com", "title": "Example Domain"}]
    assert dashboard.databases == ["/data/app.db"]
    assert [label for _, label in dashboard.activity] == ["a.md"]


def test_activity_keeps_only_latest_reads():
    bus = EventBus()
    dashboard = Dashboard(bus, console=_console(), max_activity=5)

    for i in range(7):
        bus.resource_read(f"file{i}.md")

    assert [label for _, label in dashboard.activity] == [f"file{i}.md" for i in range(2, 7)]


def test_render_shows_sections_and_placeholders():
    bus = EventBus()
    dashboard = Dashboard(bus, folders=["/docs"], console=_console())

    before = _render(dashboard)
    bus.server_online()
    after = _render(dashboard)

    assert "Server Starting" in before
    assert "Server Online" in after
    assert "📂 Folders (1)" in after
    assert "└── /docs" in after
    assert "(waiting for reads)" in after


def test_non_terminal_prints_one_line_per_event():
    bus = EventBus()
    console = _console()
    dashboard = Dashboard(bus, console=console)

    dashboard.start()
    bus.resource_read("a.md")
    bus.folders_changed(["/docs"])
    dashboard.stop()
    bus.resource_read("ignored.md")

    out = console.file.getvalue()
    assert "⚡ read a.md" in out
    assert "📂 folders: 1 mounted" in out
    assert "ignored.md" not in out


def test_describe_lines():
    bus = EventBus()

    assert describe(bus.server_online()) == "● server online"
    assert describe(bus.pages_changed([])) == "🌐 pages: 0 mounted"
    assert describe(bus.databases_changed(["/a.db", "/b.db"])) == "🗄️  databases: 2 mounted"
