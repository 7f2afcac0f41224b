"""
In-memory remote collection client for testing.

This module provides a simple in-memory backend for:
- Unit tests
- Integration tests of cross-collection maintenance
- Local development without a configuration service

Invariants:
    - All data is lost on process exit
    - Returned entities are deep copies, never shared with callers
    - Every call is recorded in ``calls`` (including failed ones)

How to change safely:
    - Write-through and cascade tests assert on ``calls`` and inject errors
      with fail_next(); keep both recording every protocol method
    - Mirror the HTTP client's error surface: RemoteCollectionError with the
      status code the service would answer (400, 404, 409)
    - Workspace.in_memory() also serves local development, so keep CRUD
      semantics identical to the configuration service
"""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from .errors import RemoteCollectionError
from .models import CollectionName

logger = logging.getLogger(__name__)


class InMemoryCollectionClient:
    """In-memory implementation of RemoteCollectionClient for testing.

    Attributes:
        collection: Collection this client serves
        id_field: Wire name of the id attribute
        caller_ids: Whether creates must carry their own id
        calls: Log of (operation, entity_id) tuples
        return_nothing_on_add: Simulate a server that accepts a create
            but returns no body

    Example:
        >>> client = InMemoryCollectionClient(CollectionName.SINKS)
        >>> client.seed([{"uid": "d1", "type": "postgres"}])
        >>> await client.patch("d1", {"onlyKeys": ["k1"]})
        >>> client.call_count("patch")
        1
    """

    def __init__(
        self,
        collection: CollectionName,
        *,
        caller_ids: bool = False,
    ) -> None:
        self.collection = collection
        self.id_field = collection.id_field
        self.caller_ids = caller_ids
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.return_nothing_on_add = False
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._failures: Dict[Tuple[str, Optional[str]], Exception] = {}
        self._lock = asyncio.Lock()
        self._closed = False

    # -- testing helpers -------------------------------------------------

    def seed(self, rows: List[Dict[str, Any]]) -> None:
        """Store rows directly, bypassing the call log."""
        for row in rows:
            self._rows[row[self.id_field]] = copy.deepcopy(row)

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """Deep copy of stored rows keyed by id."""
        return copy.deepcopy(self._rows)

    def fail_next(
        self,
        operation: str,
        error: Optional[Exception] = None,
        entity_id: Optional[str] = None,
    ) -> None:
        """Make the next call of ``operation`` raise, optionally only for one id."""
        self._failures[(operation, entity_id)] = error or RemoteCollectionError(
            f"Injected {operation} failure",
            collection=self.collection.value,
            operation=operation,
            status_code=500,
        )

    def call_count(self, operation: str, entity_id: Optional[str] = None) -> int:
        """Number of recorded calls of ``operation``, optionally for one id."""
        return sum(
            1
            for op, called_id in self.calls
            if op == operation and (entity_id is None or called_id == entity_id)
        )

    def reset_calls(self) -> None:
        self.calls.clear()

    @property
    def is_closed(self) -> bool:
        return self._closed

    # -- protocol --------------------------------------------------------

    def _record(self, operation: str, entity_id: Optional[str] = None) -> None:
        self.calls.append((operation, entity_id))
        failure = self._failures.pop((operation, entity_id), None)
        if failure is None:
            failure = self._failures.pop((operation, None), None)
        if failure is not None:
            logger.debug(f"InMemoryCollectionClient injected failure: {operation}")
            raise failure

    def _missing(self, operation: str, entity_id: str) -> RemoteCollectionError:
        return RemoteCollectionError(
            f"{self.collection.value}/{entity_id} does not exist",
            collection=self.collection.value,
            operation=operation,
            status_code=404,
        )

    async def get_all(self) -> List[Dict[str, Any]]:
        async with self._lock:
            self._record("get_all")
            return [copy.deepcopy(row) for row in self._rows.values()]

    async def get(self, entity_id: str) -> Dict[str, Any]:
        async with self._lock:
            self._record("get", entity_id)
            if entity_id not in self._rows:
                raise self._missing("get", entity_id)
            return copy.deepcopy(self._rows[entity_id])

    async def add(self, entity: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        async with self._lock:
            entity_id = entity.get(self.id_field) or None
            self._record("add", entity_id)
            if entity_id is None:
                if self.caller_ids:
                    raise RemoteCollectionError(
                        f"{self.collection.value} requires '{self.id_field}'",
                        collection=self.collection.value,
                        operation="add",
                        status_code=400,
                    )
                entity_id = uuid.uuid4().hex[:12]
            if entity_id in self._rows:
                raise RemoteCollectionError(
                    f"{self.collection.value}/{entity_id} already exists",
                    collection=self.collection.value,
                    operation="add",
                    status_code=409,
                )
            row = {**copy.deepcopy(entity), self.id_field: entity_id}
            self._rows[entity_id] = row
            if self.return_nothing_on_add:
                return None
            return copy.deepcopy(row)

    async def patch(self, entity_id: str, partial: Dict[str, Any]) -> None:
        async with self._lock:
            self._record("patch", entity_id)
            if entity_id not in self._rows:
                raise self._missing("patch", entity_id)
            self._rows[entity_id].update(copy.deepcopy(partial))

    async def replace(self, entity_id: str, entity: Dict[str, Any]) -> None:
        async with self._lock:
            self._record("replace", entity_id)
            if entity_id not in self._rows:
                raise self._missing("replace", entity_id)
            self._rows[entity_id] = {**copy.deepcopy(entity), self.id_field: entity_id}

    async def delete(self, entity_id: str) -> None:
        async with self._lock:
            self._record("delete", entity_id)
            self._rows.pop(entity_id, None)

    async def close(self) -> None:
        self._closed = True
