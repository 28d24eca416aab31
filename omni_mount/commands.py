"""
Command surface: each command takes plain arguments and returns a reply text.

Failures are part of the reply (❌/⚠️/ℹ️ prefixes), never exceptions, so the
calling agent can read them and react.
"""
import json
from collections.abc import Awaitable, Callable
from typing import Any

from .core import Outcome, Status
from .db import MAX_ROWS
from .registry import Registry

MOUNT_DESCRIPTION = (
    "Mount a local folder so its .txt and .md files become readable resources. "
    "The mount is persisted across server restarts."
)


def _with_warning(text: str, outcome: Outcome) -> str:
    if outcome.warning:
        return f"{text}\n\n⚠️  {outcome.warning}"
    return text


async def mount_folder(registry: Registry, path: str) -> str:
    outcome = await registry.mount_folder(path)
    data = outcome.data
    match outcome.status:
        case Status.ADDED:
            files = data["files"]
            listing = (
                "\n".join(f"  • {name}" for name in files)
                if files
                else "  (no .txt or .md files found)"
            )
            text = (
                f'✅ Successfully mounted "{data["path"]}".\n'
                f"📄 Found {data['count']} resource file(s):\n{listing}\n\n"
                f"These files are now available as resources. Use resources/list to browse them."
            )
            return _with_warning(text, outcome)
        case Status.ALREADY_MOUNTED:
            return (
                f'⚠️  "{data["path"]}" is already mounted — skipping duplicate.\n'
                f"📄 {data['count']} resource file(s) already available."
            )
        case _:
            return f"❌ {outcome.message}"


async def unmount_folder(registry: Registry, path: str) -> str:
    outcome = await registry.unmount_folder(path)
    if outcome.status == Status.REMOVED:
        text = f'✅ Successfully unmounted "{outcome.data["path"]}". Its files are no longer exposed.'
        return _with_warning(text, outcome)
    return f"ℹ️  {outcome.message}"


async def mount_url(registry: Registry, url: str) -> str:
    outcome = await registry.mount_page(url)
    data = outcome.data
    match outcome.status:
        case Status.ADDED:
            text = (
                f"✅ Successfully mounted web page.\n"
                f'🌐 Title: "{data["title"]}"\n'
                f"🔗 URL: {data['url']}\n"
                f"📄 Content: {data['length']} characters (Markdown)\n\n"
                f"Preview:\n{data['preview']}\n\n"
                f"This page is now available as a resource."
            )
            return _with_warning(text, outcome)
        case Status.ALREADY_MOUNTED:
            return (
                f'⚠️  "{data["url"]}" is already mounted — skipping duplicate.\n'
                f'📄 Cached as: "{data["title"]}" (fetched {data["fetched_at"]})'
            )
        case _:
            return f'❌ Failed to fetch "{data["url"]}": {outcome.message}'


async def mount_sqlite(registry: Registry, path: str) -> str:
    outcome = await registry.mount_database(path)
    data = outcome.data
    match outcome.status:
        case Status.ADDED:
            tables = data["tables"]
            listing = (
                "\n".join(f"  • {t}" for t in tables)
                if tables
                else "  (no user tables found)"
            )
            text = (
                f"✅ Successfully mounted SQLite database.\n"
                f"🗄️  Path: {data['path']}\n"
                f"📋 Tables ({len(tables)}):\n{listing}\n\n"
                f"The schema is now available as a resource. "
                f"Use query_sqlite to run SELECT queries."
            )
            return _with_warning(text, outcome)
        case Status.ALREADY_MOUNTED:
            return f'⚠️  "{data["path"]}" is already mounted — skipping duplicate.'
        case Status.OPEN_ERROR:
            return f"❌ Failed to open database: {outcome.message}"
        case _:
            return f"❌ {outcome.message}"


async def query_sqlite(registry: Registry, path: str, sql: str) -> str:
    outcome = await registry.query(path, sql)
    data = outcome.data
    match outcome.status:
        case Status.ROWS:
            text = json.dumps(data["rows"], indent=2, ensure_ascii=False, default=repr)
            if data["truncated"]:
                text += f"\n\n⚠️ Results truncated to {MAX_ROWS} rows ({data['total']} total)."
            return text
        case Status.NOT_MOUNTED:
            return f"❌ {outcome.message} Use mount_sqlite first."
        case Status.QUERY_ERROR:
            return f"❌ Query failed: {outcome.message}"
        case _:
            return f"❌ {outcome.message}"


async def list_mounts(registry: Registry) -> str:
    mounts = await registry.list_all()
    lines: list[str] = []

    if mounts["folders"]:
        lines.append("📂 Folders:")
        for folder in mounts["folders"]:
            lines.append(f"   • {folder['path']}  ({folder['count']} file(s))")

    if mounts["pages"]:
        if lines:
            lines.append("")
        lines.append("🌐 Web Pages:")
        for page in mounts["pages"]:
            lines.append(f"   • {page['title']}  →  {page['url']}")

    if mounts["databases"]:
        if lines:
            lines.append("")
        lines.append("🗄️  Databases:")
        for database in mounts["databases"]:
            lines.append(f"   • {database['path']}")

    if not lines:
        return "No directories, URLs, or databases are currently mounted."
    return "Currently mounted sources:\n" + "\n".join(lines)


Handler = Callable[..., Awaitable[str]]

# name -> (handler, description)
COMMANDS: dict[str, tuple[Handler, str]] = {
    "mount_folder": (mount_folder, MOUNT_DESCRIPTION),
    "add_new_source": (mount_folder, MOUNT_DESCRIPTION + " (Alias for mount_folder.)"),
    "unmount_folder": (
        unmount_folder,
        "Unmount a previously mounted folder so its files are no longer exposed as resources.",
    ),
    "mount_url": (
        mount_url,
        "Fetch a web page, convert its HTML to Markdown, and expose it as a resource. "
        "The content is cached and persisted across server restarts.",
    ),
    "mount_sqlite": (
        mount_sqlite,
        "Mount a local SQLite database file. Its schema is automatically exposed as a "
        "resource so the AI knows the table structures. Use query_sqlite to run SELECT "
        "queries against it.",
    ),
    "query_sqlite": (
        query_sqlite,
        "Execute a read-only SQL query (SELECT only) against a mounted SQLite database "
        f"and return the results as JSON. Maximum {MAX_ROWS} rows returned.",
    ),
    "list_mounts": (
        list_mounts,
        "List all currently mounted directories, URLs, and databases.",
    ),
}


async def dispatch(registry: Registry, name: str, args: dict[str, Any] | None = None) -> str:
    """Run a command by name. Unknown commands and bad arguments become reply text too."""
    entry = COMMANDS.get(name)
    if entry is None:
        return f"❌ Unknown command: {name}"
    handler, _ = entry
    try:
        return await handler(registry, **(args or {}))
    except TypeError as e:
        return f"❌ Invalid arguments for {name}: {e}"
