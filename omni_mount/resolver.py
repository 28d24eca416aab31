"""
Map resource identifiers to reads against the registry.

Identifiers come in three shapes, parsed into tagged variants:
  file:///<absolute path>     -> FileResource   (a .txt/.md file in a mounted folder)
  web:///<url>                -> PageResource   (a cached page)
  sqlite:///<absolute path>   -> SchemaResource (live schema of a mounted database)

Reads never raise for missing or unreadable targets; the error is embedded in
the returned text so a listing or a batch of reads keeps going.
"""
import asyncio
import os
import sqlite3
from pathlib import Path
from urllib.parse import unquote

from . import db
from .core import (
    FileResource,
    MountedPage,
    PageResource,
    Resource,
    ResourceContent,
    ResourceInfo,
    SchemaResource,
)
from .folders import ALLOWED_EXTENSIONS, collect_all_files, mime_type, read_text, resource_name
from .registry import Registry


def parse_uri(uri: str) -> Resource:
    scheme, sep, rest = uri.partition(":///")
    if not sep:
        raise ValueError(f"Unsupported resource URI: {uri}")
    match scheme:
        case "file":
            return FileResource("/" + unquote(rest))
        case "web":
            return PageResource(rest)
        case "sqlite":
            return SchemaResource("/" + unquote(rest))
        case _:
            raise ValueError(f"Unsupported resource URI: {uri}")


async def list_resources(registry: Registry) -> list[ResourceInfo]:
    roots = registry.folder_paths()
    files = await asyncio.to_thread(collect_all_files, roots)
    out: list[ResourceInfo] = []
    for f in files:
        name = resource_name(f, roots)
        out.append(
            ResourceInfo(
                uri=FileResource(str(f)).uri,
                name=name,
                description=f"Local file: {name}",
                mime_type=mime_type(f),
            )
        )
    for page in registry.pages.values():
        out.append(
            ResourceInfo(
                uri=PageResource(page.url).uri,
                name=f"🌐 {page.title}",
                description=f"Web page: {page.url}",
                mime_type="text/markdown",
            )
        )
    for path in registry.databases:
        out.append(
            ResourceInfo(
                uri=SchemaResource(path).uri,
                name=f"🗄️ {Path(path).name} schema",
                description=f"Schema for SQLite database: {path}",
                mime_type="text/markdown",
            )
        )
    return out


async def read_resource(registry: Registry, resource: Resource | str) -> ResourceContent:
    if isinstance(resource, str):
        resource = parse_uri(resource)

    match resource:
        case FileResource(path=path):
            return await _read_file(registry, resource, path)
        case PageResource(url=url):
            return _read_page(registry, resource, url)
        case SchemaResource(path=path):
            return _read_schema(registry, resource, path)
        case _:
            raise TypeError(f"Not a resource: {resource!r}")


def _error(resource: Resource, text: str) -> ResourceContent:
    return ResourceContent(uri=resource.uri, mime_type="text/plain", text=f"[Error] {text}")


def _owned(registry: Registry, path: Path) -> bool:
    if path.suffix.lower() not in ALLOWED_EXTENSIONS:
        return False
    return any(path.is_relative_to(root) for root in registry.folder_paths())


async def _read_file(registry: Registry, resource: FileResource, path: str) -> ResourceContent:
    registry.bus.resource_read(Path(path).name)
    # ".." segments must not climb out of a mounted tree
    normalized = os.path.normpath(path)
    if not _owned(registry, Path(normalized)):
        return _error(resource, f"File is not inside a mounted folder: {path}")
    try:
        text = await asyncio.to_thread(read_text, normalized)
    except (OSError, UnicodeDecodeError):
        return _error(resource, f"Unable to read file: {path}")
    return ResourceContent(uri=resource.uri, mime_type=mime_type(path), text=text)


def _find_page(registry: Registry, url: str) -> MountedPage | None:
    # Clients may hand back the percent-encoded form of a listed URI.
    decoded = unquote(url)
    for key in (url, f"https://{url}", decoded, f"https://{decoded}"):
        entry = registry.pages.get(key)
        if entry is not None:
            return entry
    return None


def _read_page(registry: Registry, resource: PageResource, url: str) -> ResourceContent:
    entry = _find_page(registry, url)
    registry.bus.resource_read(f"🌐 {entry.title if entry else url}")
    if entry is None:
        return _error(resource, f"URL not mounted: {url}")
    text = (
        f"# {entry.title}\n\n"
        f"> Source: {entry.url}  \n"
        f"> Fetched: {entry.fetched_at}\n\n"
        f"---\n\n"
        f"{entry.content}"
    )
    return ResourceContent(uri=resource.uri, mime_type="text/markdown", text=text)


def _read_schema(registry: Registry, resource: SchemaResource, path: str) -> ResourceContent:
    name = Path(path).name
    registry.bus.resource_read(f"🗄️ {name} schema")
    mounted = registry.databases.get(path)
    if mounted is None:
        return _error(resource, f"Database not mounted: {path}")
    try:
        schema = db.schema_markdown(mounted.handle)
    except sqlite3.Error as e:
        return _error(resource, f"Unable to read schema of {path}: {e}")
    text = f"# Schema: {name}\n\n> Path: `{path}`\n\n{schema}"
    return ResourceContent(uri=resource.uri, mime_type="text/markdown", text=text)
