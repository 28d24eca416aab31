import asyncio
import sys

import omni_mount as om

# Print every bus event as it happens, the way the dashboard sees them.
bus = om.EventBus()
bus.subscribe(lambda ev: print(f"[{ev.kind}] {ev.payload}"))


async def mount_and_read(url: str) -> om.ResourceContent:
    registry = om.Registry(bus=bus)
    outcome = await registry.mount_page(url)
    if not outcome.ok:
        raise SystemExit(outcome.message)
    return await om.read_resource(registry, om.PageResource(url))


if __name__ == "__main__":
    content = asyncio.run(mount_and_read(sys.argv[1] if len(sys.argv) > 1 else "https://example.com"))
    print(content.text)
