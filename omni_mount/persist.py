import json
import os
import sqlite3
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from . import db
from .core import MountedDatabase, MountedPage, Traced


@dataclass
class RegistrySeed:
    folders: list[str] = field(default_factory=list)
    pages: list[MountedPage] = field(default_factory=list)
    databases: list[MountedDatabase] = field(default_factory=list)


class RegistryStore(Traced):
    """
    JSON file holding the mounts so they survive a restart.

    Layout: `{"mountedPaths": [...], "mountedUrls": [{url, title, content,
    fetchedAt}], "mountedDatabases": [...]}`. Loading is forgiving: a missing,
    unreadable or malformed file yields an empty seed, bad entries are skipped,
    and each database is reopened independently (failures are dropped).
    Saving never raises; the error is returned for the caller to surface.
    """

    def __init__(
        self,
        path: str | Path,
        opener: Callable[[str], sqlite3.Connection] = db.open_readonly,
    ):
        super().__init__()
        self.path = Path(path)
        self.opener = opener
        self.name = "RegistryStore"

    def load(self) -> RegistrySeed:
        raw = self._read()
        seed = RegistrySeed()

        for p in _list(raw, "mountedPaths"):
            if isinstance(p, str):
                seed.folders.append(p)

        for entry in _list(raw, "mountedUrls"):
            if isinstance(entry, dict) and isinstance(entry.get("url"), str):
                seed.pages.append(MountedPage.from_dict(entry))

        db_paths = [p for p in _list(raw, "mountedDatabases") if isinstance(p, str)]
        seed.databases = self.open_databases(db_paths)

        self.log(
            "load",
            path=str(self.path),
            folders=len(seed.folders),
            pages=len(seed.pages),
            databases=len(seed.databases),
            dropped=len(db_paths) - len(seed.databases),
        )
        return seed

    def open_databases(self, paths: list[str]) -> list[MountedDatabase]:
        opened: list[MountedDatabase] = []
        seen = set()
        for path in paths:
            if path in seen:
                continue
            seen.add(path)
            try:
                handle = self.opener(path)
            except (sqlite3.Error, OSError) as e:
                self.log("reconnect", ok=False, path=path, error=str(e))
                continue
            opened.append(MountedDatabase(path=path, handle=handle))
            self.log("reconnect", ok=True, path=path)
        return opened

    def save(self, snapshot: dict[str, Any]) -> tuple[bool, str | None]:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(
                json.dumps(snapshot, indent=2, ensure_ascii=False), encoding="utf-8"
            )
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            with suppress(OSError):
                tmp.unlink(missing_ok=True)
            self.log("save", ok=False, path=str(self.path), error=str(e))
            return False, str(e)
        self.log("save", ok=True, path=str(self.path))
        return True, None

    # ---------- helpers ----------
    def _read(self) -> dict:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.log("load", ok=False, path=str(self.path), error=str(e))
            return {}
        try:
            data = json.loads(text)
        except ValueError as e:
            self.log("load", ok=False, path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}


def _list(raw: dict, key: str) -> list:
    value = raw.get(key)
    return value if isinstance(value, list) else []
