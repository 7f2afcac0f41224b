"""
Workspace composition root.

Builds the keys, sinks and sources collections for one workspace and wires
each into the siblings it maintains links in. There are no module-level
store instances; callers own the Workspace.

Example:
    >>> async with Workspace.from_settings(Settings()) as ws:
    ...     await ws.pull_all(full_page_load=True)
    ...     await ws.keys.generate_add_initial_key_if_needed()
    ...     warnings = ws.orphans()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional

import httpx

from .config import Settings
from .keys import DEFAULT_TOKEN_LENGTH, KeysCollection
from .memory import InMemoryCollectionClient
from .models import CollectionName
from .orphans import OrphanDetector, OrphanWarning
from .remote import RemoteCollectionClient, create_remote_client
from .sinks import ReferenceCatalog, SinksCollection
from .sources import SourcesCollection

logger = logging.getLogger(__name__)

ClientFactory = Callable[[CollectionName], RemoteCollectionClient]


class Workspace:
    """The three wired collections of one workspace.

    Attributes:
        keys: API keys collection
        sinks: Sinks (destinations) collection
        sources: Sources collection
    """

    def __init__(
        self,
        keys: KeysCollection,
        sinks: SinksCollection,
        sources: SourcesCollection,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.keys = keys
        self.sinks = sinks
        self.sources = sources
        self._http_client = http_client

        keys.inject_sinks(sinks)
        sinks.inject_sources(sources)
        sources.inject_sinks(sinks)

    @classmethod
    def build(
        cls,
        client_factory: ClientFactory,
        project_id: str,
        catalog: Optional[ReferenceCatalog] = None,
        token_length: int = DEFAULT_TOKEN_LENGTH,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> Workspace:
        """Create collections from a per-collection client factory."""
        keys = KeysCollection(
            client_factory(CollectionName.KEYS),
            project_id=project_id,
            token_length=token_length,
        )
        sinks = SinksCollection(client_factory(CollectionName.SINKS), catalog=catalog)
        sources = SourcesCollection(client_factory(CollectionName.SOURCES))
        return cls(keys, sinks, sources, http_client=http_client)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        catalog: Optional[ReferenceCatalog] = None,
    ) -> Workspace:
        """Create a workspace backed by the configured remote service."""
        http_client: Optional[httpx.AsyncClient] = None
        if settings.api_base_url:
            http_client = httpx.AsyncClient(
                base_url=settings.api_base_url,
                timeout=settings.request_timeout,
            )
        logger.info(
            f"Workspace {settings.workspace_id} using "
            f"{settings.api_base_url or 'in-memory backend'}"
        )
        return cls.build(
            lambda collection: create_remote_client(settings, collection, http_client),
            project_id=settings.workspace_id,
            catalog=catalog,
            token_length=settings.token_length,
            http_client=http_client,
        )

    @classmethod
    def in_memory(
        cls,
        project_id: str = "default",
        catalog: Optional[ReferenceCatalog] = None,
    ) -> Workspace:
        """Create a workspace on in-memory clients (tests, local development)."""
        return cls.build(
            lambda collection: InMemoryCollectionClient(
                collection,
                caller_ids=collection is CollectionName.KEYS,
            ),
            project_id=project_id,
            catalog=catalog,
        )

    async def pull_all(self, full_page_load: bool = False) -> None:
        """Refresh all three collections concurrently."""
        await asyncio.gather(
            self.keys.pull_all(full_page_load),
            self.sinks.pull_all(full_page_load),
            self.sources.pull_all(full_page_load),
        )

    def orphans(self) -> List[OrphanWarning]:
        return OrphanDetector(self.keys, self.sinks, self.sources).scan()

    async def close(self) -> None:
        """Close remote clients and the shared HTTP client."""
        await asyncio.gather(
            self.keys.client.close(),
            self.sinks.client.close(),
            self.sources.client.close(),
        )
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> Workspace:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
