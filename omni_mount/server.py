"""
MCP stdio server: commands become tools, the resolver backs resources.

Run with `omni-mount` (or `python main.py`). Configuration comes from the
`OMNI_MOUNT_*` environment variables, see `config.Settings`.
"""
import asyncio
from collections.abc import Iterable
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.types import Resource as MCPResource
from pydantic import Field

from . import commands, resolver
from .banner import banner, console
from .config import Settings
from .dashboard import Dashboard
from .registry import Registry

FolderPath = Annotated[
    str, Field(description="Absolute path to the folder to mount, e.g. /Users/you/Documents")
]
DatabasePath = Annotated[
    str, Field(description="Absolute path to the SQLite database file, e.g. /Users/you/data.db")
]


class OmniServer(FastMCP):
    """FastMCP server whose resource listing and reads are answered live from the registry."""

    def __init__(self, registry: Registry, name: str = "omni-mcp"):
        self.registry = registry
        super().__init__(name)
        self._register_tools()

    async def list_resources(self) -> list[MCPResource]:
        infos = await resolver.list_resources(self.registry)
        return [
            MCPResource(uri=i.uri, name=i.name, description=i.description, mimeType=i.mime_type)
            for i in infos
        ]

    async def read_resource(self, uri) -> Iterable[ReadResourceContents]:
        content = await resolver.read_resource(self.registry, str(uri))
        return [ReadResourceContents(content=content.text, mime_type=content.mime_type)]

    def _register_tools(self):
        registry = self.registry

        async def mount_folder(path: FolderPath) -> str:
            return await commands.mount_folder(registry, path)

        async def unmount_folder(
            path: Annotated[str, Field(description="Absolute path of the folder to unmount")],
        ) -> str:
            return await commands.unmount_folder(registry, path)

        async def mount_url(
            url: Annotated[
                str, Field(description="Full URL of the web page to mount, e.g. https://example.com")
            ],
        ) -> str:
            return await commands.mount_url(registry, url)

        async def mount_sqlite(path: DatabasePath) -> str:
            return await commands.mount_sqlite(registry, path)

        async def query_sqlite(
            path: Annotated[str, Field(description="Absolute path to the mounted SQLite database file")],
            sql: Annotated[str, Field(description="SQL SELECT query to execute")],
        ) -> str:
            return await commands.query_sqlite(registry, path, sql)

        async def list_mounts() -> str:
            return await commands.list_mounts(registry)

        tools = {
            "mount_folder": mount_folder,
            "add_new_source": mount_folder,
            "unmount_folder": unmount_folder,
            "mount_url": mount_url,
            "mount_sqlite": mount_sqlite,
            "query_sqlite": query_sqlite,
            "list_mounts": list_mounts,
        }
        for name, fn in tools.items():
            _, description = commands.COMMANDS[name]
            self.add_tool(fn, name=name, description=description)


async def serve(server: OmniServer):
    # Fires once the stdio transport has started and yielded control.
    asyncio.get_running_loop().call_soon(server.registry.bus.server_online)
    await server.run_stdio_async()


def main():
    settings = Settings.from_env()
    registry = Registry.boot(settings)

    dashboard = None
    if settings.dashboard:
        banner()
        dashboard = Dashboard(
            registry.bus,
            folders=registry.folder_paths(),
            pages=registry.page_infos(),
            databases=registry.database_paths(),
        )
        dashboard.start()

    server = OmniServer(registry)
    try:
        asyncio.run(serve(server))
    except Exception as e:
        console.print(f"[bold red]Fatal error:[/bold red] {e}")
        raise SystemExit(1) from e
    finally:
        if dashboard is not None:
            dashboard.stop()
        registry.close()


if __name__ == "__main__":
    main()
