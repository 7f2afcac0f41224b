"""
Remote collection client protocol.

This module defines the RemoteCollectionClient protocol that every backend
(HTTP, in-memory) implements. A client is scoped to one workspace and one
collection and speaks wire-form dictionaries.

Invariants:
    - Calls are atomic and strongly consistent for a single caller
    - add() returns the entity as stored by the server (may be normalized)
    - Failures surface as RemoteCollectionError

How to change safely:
    - Protocol changes require updating all implementations
    - Keep payloads in wire (camelCase) form; models translate
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    import httpx

    from .config import Settings
    from .models import CollectionName


@runtime_checkable
class RemoteCollectionClient(Protocol):
    """Keyed CRUD table for one collection of one workspace.

    Example:
        >>> client = HttpCollectionClient(settings, CollectionName.SOURCES)
        >>> sources = await client.get_all()
        >>> await client.patch("src_1", {"schedule": "@hourly"})
    """

    @abstractmethod
    async def get_all(self) -> List[Dict[str, Any]]:
        """Fetch every entity of the collection.

        Raises:
            RemoteCollectionError: If the fetch fails
        """
        ...

    @abstractmethod
    async def get(self, entity_id: str) -> Dict[str, Any]:
        """Fetch a single entity.

        Raises:
            RemoteCollectionError: If the entity does not exist or the fetch fails
        """
        ...

    @abstractmethod
    async def add(self, entity: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Create an entity.

        Returns:
            The stored entity, or None if the server returned nothing
        """
        ...

    @abstractmethod
    async def patch(self, entity_id: str, partial: Dict[str, Any]) -> None:
        """Shallow-merge partial into the stored entity."""
        ...

    @abstractmethod
    async def replace(self, entity_id: str, entity: Dict[str, Any]) -> None:
        """Overwrite the stored entity."""
        ...

    @abstractmethod
    async def delete(self, entity_id: str) -> None:
        """Delete the stored entity."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
        ...


def create_remote_client(
    settings: "Settings",
    collection: "CollectionName",
    http_client: Optional["httpx.AsyncClient"] = None,
) -> RemoteCollectionClient:
    """Factory function to create a remote client from configuration.

    Args:
        settings: Store configuration
        collection: Collection the client is scoped to
        http_client: Optional shared httpx client

    Returns:
        HTTP-backed client, or an in-memory one when no API URL is configured
    """
    from .http import HttpCollectionClient
    from .memory import InMemoryCollectionClient

    if not settings.api_base_url:
        return InMemoryCollectionClient(collection)
    return HttpCollectionClient(settings, collection, client=http_client)
