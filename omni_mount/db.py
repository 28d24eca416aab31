import re
import sqlite3
from pathlib import Path
from typing import Any

MAX_ROWS = 100

# Prefix check only: anything after a leading SELECT is not inspected.
_SELECT = re.compile(r"^SELECT\b", re.IGNORECASE)


def open_readonly(path: str | Path) -> sqlite3.Connection:
    """Open `path` read-only.

    sqlite opens lazily, so the schema is touched once here to surface missing,
    locked or corrupt files as `sqlite3.Error` at open time.
    """
    uri = Path(path).resolve().as_uri() + "?mode=ro"
    conn = sqlite3.connect(uri, uri=True)
    try:
        conn.execute("SELECT name FROM sqlite_master LIMIT 1").fetchall()
    except sqlite3.Error:
        conn.close()
        raise
    conn.row_factory = sqlite3.Row
    return conn


def list_tables(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master "
        "WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
    ).fetchall()
    return [r[0] for r in rows]


def columns(conn: sqlite3.Connection, table: str) -> list[dict[str, Any]]:
    quoted = table.replace('"', '""')
    rows = conn.execute(f'PRAGMA table_info("{quoted}")').fetchall()
    return [
        {
            "name": r[1],
            "type": r[2],
            "notnull": bool(r[3]),
            "default": r[4],
            "pk": bool(r[5]),
        }
        for r in rows
    ]


def is_select(sql: str) -> bool:
    return bool(_SELECT.match(sql.strip()))


def first_word(sql: str) -> str:
    parts = sql.split()
    return parts[0] if parts else ""


def execute(
    conn: sqlite3.Connection, sql: str, max_rows: int = MAX_ROWS
) -> tuple[list[dict[str, Any]], int]:
    """Run a statement and return at most `max_rows` rows plus the true row count."""
    cursor = conn.execute(sql.strip())
    names = [d[0] for d in cursor.description or []]
    rows = cursor.fetchall()
    capped = [dict(zip(names, tuple(r))) for r in rows[:max_rows]]
    return capped, len(rows)


def schema_markdown(conn: sqlite3.Connection) -> str:
    tables = list_tables(conn)
    if not tables:
        return "_No tables found._"

    lines: list[str] = []
    for name in tables:
        lines.append(f"## Table: `{name}`")
        lines.append("")
        lines.append("| Column | Type | NOT NULL | PK | Default |")
        lines.append("|--------|------|----------|----|---------|")
        for col in columns(conn, name):
            default = "" if col["default"] is None else col["default"]
            lines.append(
                f"| `{col['name']}` | {col['type'] or 'ANY'} "
                f"| {'✓' if col['notnull'] else ''} "
                f"| {'✓' if col['pk'] else ''} | {default} |"
            )
        lines.append("")
    return "\n".join(lines)
