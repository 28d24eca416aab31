from .config import Settings
from .core import (
    FileResource,
    MountedDatabase,
    MountedFolder,
    MountedPage,
    Outcome,
    PageResource,
    ResourceContent,
    ResourceInfo,
    SchemaResource,
    Status,
    TraceEvent,
)
from .events import Event, EventBus
from .pages import FetchError, PageFetcher, html_to_text
from .persist import RegistrySeed, RegistryStore
from .registry import Registry
from .resolver import list_resources, parse_uri, read_resource

__version__ = "3.0.0"
