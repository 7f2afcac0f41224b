"""
Configuration store - keeps a workspace's configuration graph in sync.

This package caches three remote collections and keeps their
cross-references consistent:
- KeysCollection: API keys (linked to sinks through Sink.only_keys)
- SinksCollection: destinations (Sink.only_keys, Sink.sources)
- SourcesCollection: connectors (Source.destinations mirrors Sink.sources)
- Workspace: composition root wiring the three together
- OrphanDetector: warnings for unlinked entities

Example:
    >>> from configstore import Settings, Workspace
    >>>
    >>> async with Workspace.from_settings(Settings()) as ws:
    ...     await ws.pull_all(full_page_load=True)
    ...     key = await ws.keys.add(comment="website")
    ...     await ws.sinks.link_keys_to_sinks([key.uid], ["d1"])

Invariants:
    - Local caches change only after the remote write succeeded
    - Denormalized links are repaired through the owning collection's patch()
    - Cascades are best-effort and report failures per entity

Version: 1.0.0
"""

__version__ = "1.0.0"

from .collection import CascadeReport, EntityCollection, fan_out_patches
from .config import Settings
from .errors import (
    ConfigStoreError,
    FetchError,
    InvalidPatchError,
    MissingIdError,
    NotFoundError,
    PatchTooDeepError,
    RemoteCollectionError,
    RemoteWriteError,
)
from .http import HttpCollectionClient
from .keys import KeysCollection
from .memory import InMemoryCollectionClient
from .models import CollectionName, Entity, Key, Sink, Source
from .orphans import OrphanDetector, OrphanKind, OrphanWarning
from .remote import RemoteCollectionClient, create_remote_client
from .sinks import ReferenceCatalog, SinksCollection, StaticReferenceCatalog
from .sources import SourcesCollection
from .status import CollectionStatus, StatusTracker
from .workspace import Workspace

__all__ = [
    # Version
    "__version__",
    # Models
    "CollectionName",
    "Entity",
    "Key",
    "Sink",
    "Source",
    # Collections
    "EntityCollection",
    "KeysCollection",
    "SinksCollection",
    "SourcesCollection",
    "CascadeReport",
    "fan_out_patches",
    "CollectionStatus",
    "StatusTracker",
    # Remote clients
    "RemoteCollectionClient",
    "HttpCollectionClient",
    "InMemoryCollectionClient",
    "create_remote_client",
    # Catalog and orphans
    "ReferenceCatalog",
    "StaticReferenceCatalog",
    "OrphanDetector",
    "OrphanKind",
    "OrphanWarning",
    # Composition
    "Settings",
    "Workspace",
    # Errors
    "ConfigStoreError",
    "RemoteCollectionError",
    "RemoteWriteError",
    "NotFoundError",
    "PatchTooDeepError",
    "MissingIdError",
    "FetchError",
    "InvalidPatchError",
]
