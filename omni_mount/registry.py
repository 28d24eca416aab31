import asyncio
import os
import sqlite3
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from . import db
from .banner import console
from .config import Settings
from .core import (
    MountedDatabase,
    MountedFolder,
    MountedPage,
    Outcome,
    Status,
    Traced,
)
from .events import EventBus
from .folders import collect_files, resource_name
from .pages import PageFetcher, looks_like_url
from .persist import RegistrySeed, RegistryStore
from .utils import clip, now_iso, timer

Fetcher = Callable[[str], Awaitable[tuple[str, str]]]


def normalize_path(path: str) -> str:
    return os.path.abspath(os.path.expanduser(path))


def _path_kind(path: str) -> str | None:
    p = Path(path)
    try:
        if p.is_dir():
            return "dir"
        if p.is_file():
            return "file"
        if p.exists():
            return "other"
    except OSError:
        pass
    return None


class Registry(Traced):
    """
    Authoritative record of everything mounted: folders, pages and databases.

    The three collections are independent. Every successful mutation is
    persisted through `store` (failures come back as `Outcome.warning`) and
    announced on `bus` with the full snapshot of the changed collection.
    Collections are only touched between awaits, so a reader never sees a
    half-inserted entry.

    Known race: two `mount_page` calls for the same URL that overlap both pass
    the presence check and both fetch; the later insert wins and a single
    entry remains.
    """

    def __init__(
        self,
        store: RegistryStore | None = None,
        bus: EventBus | None = None,
        fetcher: Fetcher | None = None,
        opener: Callable[[str], sqlite3.Connection] = db.open_readonly,
    ):
        super().__init__()
        self.folders: dict[str, MountedFolder] = {}
        self.pages: dict[str, MountedPage] = {}
        self.databases: dict[str, MountedDatabase] = {}
        self.store = store
        self.bus = bus if bus is not None else EventBus()
        self.fetcher = fetcher if fetcher is not None else PageFetcher()
        self.opener = opener
        self.name = "Registry"

    @classmethod
    def boot(
        cls,
        settings: Settings,
        bus: EventBus | None = None,
        fetcher: Fetcher | None = None,
    ) -> "Registry":
        store = RegistryStore(settings.config_path)
        registry = cls(
            store=store,
            bus=bus,
            fetcher=fetcher
            or PageFetcher(
                user_agent=settings.user_agent, timeout=settings.fetch_timeout
            ),
        )
        registry.seed(store.load())
        default_dir = str(settings.default_dir)
        registry.folders.setdefault(default_dir, MountedFolder(default_dir))
        return registry

    def seed(self, seed: RegistrySeed):
        for path in seed.folders:
            self.folders.setdefault(path, MountedFolder(path))
        for page in seed.pages:
            self.pages[page.url] = page
        for mounted in seed.databases:
            if mounted.path in self.databases:
                mounted.handle.close()
                continue
            self.databases[mounted.path] = mounted
        self.log(
            "seed",
            folders=len(self.folders),
            pages=len(self.pages),
            databases=len(self.databases),
        )

    # ---------- folders ----------
    async def mount_folder(self, path: str) -> Outcome:
        resolved = normalize_path(path)
        kind = await asyncio.to_thread(_path_kind, resolved)
        if kind is None:
            return self._done(
                "mount_folder",
                Outcome(Status.NOT_FOUND, f'Path "{resolved}" does not exist.', {"path": resolved}),
            )
        if kind != "dir":
            return self._done(
                "mount_folder",
                Outcome(Status.NOT_A_DIRECTORY, f'"{resolved}" is not a directory.', {"path": resolved}),
            )

        if resolved in self.folders:
            files = await asyncio.to_thread(collect_files, resolved)
            return self._done(
                "mount_folder",
                Outcome(
                    Status.ALREADY_MOUNTED,
                    f'"{resolved}" is already mounted.',
                    {"path": resolved, "count": len(files)},
                ),
            )

        self.folders[resolved] = MountedFolder(resolved)
        warning = self._persist()
        self.bus.folders_changed(self.folder_paths())

        files = await asyncio.to_thread(collect_files, resolved)
        names = [resource_name(f, [resolved]) for f in files]
        return self._done(
            "mount_folder",
            Outcome(
                Status.ADDED,
                f'Mounted "{resolved}".',
                {"path": resolved, "count": len(names), "files": names},
                warning=warning,
            ),
        )

    async def unmount_folder(self, path: str) -> Outcome:
        resolved = normalize_path(path)
        if resolved not in self.folders:
            return self._done(
                "unmount_folder",
                Outcome(Status.NOT_MOUNTED, f'"{resolved}" is not currently mounted.', {"path": resolved}),
            )

        del self.folders[resolved]
        warning = self._persist()
        self.bus.folders_changed(self.folder_paths())
        return self._done(
            "unmount_folder",
            Outcome(Status.REMOVED, f'Unmounted "{resolved}".', {"path": resolved}, warning=warning),
        )

    # ---------- pages ----------
    async def mount_page(self, url: str) -> Outcome:
        normalized = url.strip()
        existing = self.pages.get(normalized)
        if existing is not None:
            return self._done(
                "mount_page",
                Outcome(
                    Status.ALREADY_MOUNTED,
                    f'"{normalized}" is already mounted.',
                    {"url": normalized, "title": existing.title, "fetched_at": existing.fetched_at},
                ),
            )

        if not looks_like_url(normalized):
            return self._done(
                "mount_page",
                Outcome(Status.FETCH_ERROR, f'Invalid URL: "{normalized}"', {"url": normalized}),
            )

        with timer() as t:
            try:
                title, content = await self.fetcher(normalized)
            except Exception as e:
                self.log("fetch", ok=False, url=normalized, error=str(e), seconds=t())
                return self._done(
                    "mount_page",
                    Outcome(Status.FETCH_ERROR, str(e) or type(e).__name__, {"url": normalized}),
                )
        self.log("fetch", ok=True, url=normalized, chars=len(content), seconds=t())

        page = MountedPage(url=normalized, title=title, content=content, fetched_at=now_iso())
        self.pages[normalized] = page
        warning = self._persist()
        self.bus.pages_changed(self.page_infos())
        return self._done(
            "mount_page",
            Outcome(
                Status.ADDED,
                f'Mounted "{normalized}".',
                {
                    "url": normalized,
                    "title": title,
                    "length": len(content),
                    "preview": clip(content, 200),
                    "fetched_at": page.fetched_at,
                },
                warning=warning,
            ),
        )

    # ---------- databases ----------
    async def mount_database(self, path: str) -> Outcome:
        resolved = normalize_path(path)
        if resolved in self.databases:
            return self._done(
                "mount_database",
                Outcome(Status.ALREADY_MOUNTED, f'"{resolved}" is already mounted.', {"path": resolved}),
            )

        kind = await asyncio.to_thread(_path_kind, resolved)
        if kind is None:
            return self._done(
                "mount_database",
                Outcome(Status.NOT_FOUND, f'File "{resolved}" does not exist.', {"path": resolved}),
            )
        if kind != "file":
            return self._done(
                "mount_database",
                Outcome(Status.NOT_A_FILE, f'"{resolved}" is not a file.', {"path": resolved}),
            )

        try:
            handle = self.opener(resolved)
        except (sqlite3.Error, OSError) as e:
            return self._done(
                "mount_database",
                Outcome(Status.OPEN_ERROR, str(e), {"path": resolved}),
            )

        # Another mount of the same path may have finished while we awaited.
        if resolved in self.databases:
            handle.close()
            return self._done(
                "mount_database",
                Outcome(Status.ALREADY_MOUNTED, f'"{resolved}" is already mounted.', {"path": resolved}),
            )

        self.databases[resolved] = MountedDatabase(path=resolved, handle=handle)
        warning = self._persist()
        self.bus.databases_changed(self.database_paths())
        try:
            tables = db.list_tables(handle)
        except sqlite3.Error as e:
            self.log("list_tables", ok=False, path=resolved, error=str(e))
            tables = []
        return self._done(
            "mount_database",
            Outcome(
                Status.ADDED,
                f'Mounted "{resolved}".',
                {"path": resolved, "tables": tables},
                warning=warning,
            ),
        )

    async def query(self, path: str, sql: str) -> Outcome:
        resolved = normalize_path(path)
        mounted = self.databases.get(resolved)
        if mounted is None:
            return self._done(
                "query",
                Outcome(Status.NOT_MOUNTED, f'Database "{resolved}" is not mounted.', {"path": resolved}),
            )

        statement = sql.strip()
        if not db.is_select(statement):
            keyword = db.first_word(statement)
            return self._done(
                "query",
                Outcome(
                    Status.REJECTED_STATEMENT,
                    f'Only SELECT queries are allowed. Received: "{keyword}"',
                    {"path": resolved, "keyword": keyword},
                ),
            )

        self.bus.resource_read(f"🗄️ query → {Path(resolved).name}")
        try:
            rows, total = db.execute(mounted.handle, statement, max_rows=db.MAX_ROWS)
        except (sqlite3.Error, sqlite3.Warning) as e:
            return self._done(
                "query",
                Outcome(Status.QUERY_ERROR, str(e), {"path": resolved}),
            )
        return self._done(
            "query",
            Outcome(
                Status.ROWS,
                f"{len(rows)} row(s)",
                {"path": resolved, "rows": rows, "total": total, "truncated": total > db.MAX_ROWS},
            ),
        )

    # ---------- views ----------
    async def list_all(self) -> dict[str, list[dict[str, Any]]]:
        folders = []
        for path in list(self.folders):
            files = await asyncio.to_thread(collect_files, path)
            folders.append({"path": path, "count": len(files)})
        return {
            "folders": folders,
            "pages": [
                {"url": p.url, "title": p.title, "fetched_at": p.fetched_at}
                for p in self.pages.values()
            ],
            "databases": [{"path": p} for p in self.databases],
        }

    def folder_paths(self) -> list[str]:
        return list(self.folders)

    def page_infos(self) -> list[dict[str, str]]:
        return [{"url": p.url, "title": p.title} for p in self.pages.values()]

    def database_paths(self) -> list[str]:
        return list(self.databases)

    def snapshot(self) -> dict[str, Any]:
        return {
            "mountedPaths": self.folder_paths(),
            "mountedUrls": [p.to_dict() for p in self.pages.values()],
            "mountedDatabases": self.database_paths(),
        }

    def close(self):
        for mounted in self.databases.values():
            try:
                mounted.handle.close()
            except sqlite3.Error as e:
                self.log("close", ok=False, path=mounted.path, error=str(e))

    # ---------- helpers ----------
    def _persist(self) -> str | None:
        if self.store is None:
            return None
        ok, error = self.store.save(self.snapshot())
        self.log("persist", ok=ok, error=error)
        if ok:
            return None
        warning = f"Failed to save config: {error}"
        console.print(f"[yellow]⚠️  {warning}[/yellow]")
        return warning

    def _done(self, op: str, outcome: Outcome) -> Outcome:
        self.log(op, status=outcome.status, **{k: v for k, v in outcome.data.items() if k in ("path", "url")})
        return outcome
