import asyncio
import sqlite3
import sys
from pathlib import Path

import omni_mount as om
from omni_mount import commands


def make_sample(root: Path) -> tuple[Path, Path]:
    docs = root / "docs"
    docs.mkdir(parents=True, exist_ok=True)
    (docs / "readme.md").write_text("# Notes\n\nMount me.", encoding="utf-8")
    (docs / "todo.txt").write_text("- try query_sqlite", encoding="utf-8")

    db_path = root / "shop.db"
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE IF NOT EXISTS items (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    conn.execute("DELETE FROM items")
    conn.executemany("INSERT INTO items (name) VALUES (?)", [("apple",), ("pear",)])
    conn.commit()
    conn.close()
    return docs, db_path


async def explore(registry: om.Registry, docs: Path, db_path: Path) -> list[str]:
    """Mount a folder and a database, then read everything back like an agent would."""
    replies = [
        await commands.dispatch(registry, "mount_folder", {"path": str(docs)}),
        await commands.dispatch(registry, "mount_sqlite", {"path": str(db_path)}),
        await commands.dispatch(
            registry, "query_sqlite", {"path": str(db_path), "sql": "SELECT name FROM items ORDER BY id"}
        ),
    ]
    for info in await om.list_resources(registry):
        content = await om.read_resource(registry, info.uri)
        replies.append(f"{info.name}\n{content.text}")
    replies.append(await commands.dispatch(registry, "list_mounts"))
    return replies


if __name__ == "__main__":
    root = Path(sys.argv[1] if len(sys.argv) > 1 else "./sample")
    docs, db_path = make_sample(root)
    registry = om.Registry(store=om.RegistryStore(root / "config.json"))
    try:
        for reply in asyncio.run(explore(registry, docs, db_path)):
            print(reply, end="\n\n")
    finally:
        registry.close()
    registry.explain_trace()
