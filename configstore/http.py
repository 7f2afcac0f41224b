"""
HTTP remote collection client.

Talks to the configuration service objects API:

    GET    /api/v2/objects/{workspace}/{collection}        get_all
    GET    /api/v2/objects/{workspace}/{collection}/{id}   get
    POST   /api/v2/objects/{workspace}/{collection}        add
    PATCH  /api/v2/objects/{workspace}/{collection}/{id}   patch
    PUT    /api/v2/objects/{workspace}/{collection}/{id}   replace
    DELETE /api/v2/objects/{workspace}/{collection}/{id}   delete

Invariants:
    - Transport errors and non-2xx responses raise RemoteCollectionError
    - An empty create response is returned as None
    - A client passed in by the caller is never closed here
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import Settings
from .errors import RemoteCollectionError
from .models import CollectionName

logger = logging.getLogger(__name__)


class HttpCollectionClient:
    """httpx-backed RemoteCollectionClient for one workspace collection.

    Example:
        >>> async with HttpCollectionClient(settings, CollectionName.SINKS) as sinks:
        ...     rows = await sinks.get_all()
    """

    def __init__(
        self,
        settings: Settings,
        collection: CollectionName,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize client.

        Args:
            settings: Store configuration (base URL, token, timeout)
            collection: Collection to operate on
            client: Optional shared httpx client; must carry the base URL
        """
        self.collection = collection
        self._path = settings.objects_path(collection)
        self._headers: Dict[str, str] = {}
        if settings.api_token:
            self._headers["Authorization"] = f"Bearer {settings.api_token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> HttpCollectionClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def _url(self, entity_id: Optional[str] = None) -> str:
        if entity_id is None:
            return self._path
        return f"{self._path}/{quote(entity_id, safe='')}"

    async def _request(
        self,
        method: str,
        operation: str,
        entity_id: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                self._url(entity_id),
                json=json,
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteCollectionError(
                f"{method} {self._url(entity_id)} returned {status}",
                collection=self.collection.value,
                operation=operation,
                status_code=status,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteCollectionError(
                f"{method} {self._url(entity_id)} failed: {e}",
                collection=self.collection.value,
                operation=operation,
            ) from e

        logger.debug(f"{method} {self._url(entity_id)} -> {response.status_code}")
        return response

    async def get_all(self) -> List[Dict[str, Any]]:
        response = await self._request("GET", "get_all")
        body = response.json() if response.content else []
        if isinstance(body, dict):
            # Older service versions wrap the list: {"destinations": [...]}
            body = body.get(self.collection.value, [])
        return list(body or [])

    async def get(self, entity_id: str) -> Dict[str, Any]:
        response = await self._request("GET", "get", entity_id)
        return response.json()

    async def add(self, entity: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        response = await self._request("POST", "add", json=entity)
        if not response.content:
            return None
        return response.json() or None

    async def patch(self, entity_id: str, partial: Dict[str, Any]) -> None:
        await self._request("PATCH", "patch", entity_id, json=partial)

    async def replace(self, entity_id: str, entity: Dict[str, Any]) -> None:
        await self._request("PUT", "replace", entity_id, json=entity)

    async def delete(self, entity_id: str) -> None:
        await self._request("DELETE", "delete", entity_id)
