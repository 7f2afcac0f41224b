"""
Generic write-through entity collection.

An EntityCollection owns the authoritative in-memory list for one entity
type and keeps it synchronized with a RemoteCollectionClient:
- pull_all: wholesale refresh, failures recorded in state
- add / patch / replace / delete: remote write first, local commit after
- cascade hooks: subclasses push compensating patches into sibling
  collections through their public patch() entry point

Invariants:
    - The local list changes only after the remote call succeeded
    - Patches are validated against the model before any remote call
    - A failed mutation leaves the list exactly as it was and re-raises
    - A failed pull keeps the stale list and enters the sticky ERROR state
    - Only this collection mutates its own list
    - Cascade fan-out is best-effort: one failed patch never aborts the others

How to change safely:
    - New mutations must go through _mutation() so status and logging stay uniform
    - Cross-collection effects belong in the _after_* hooks, never in callers
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
)

from pydantic import ValidationError

from .errors import (
    FetchError,
    InvalidPatchError,
    MissingIdError,
    NotFoundError,
    PatchTooDeepError,
    RemoteWriteError,
)
from .models import CollectionName, Entity
from .remote import RemoteCollectionClient
from .status import CollectionStatus, StatusTracker
from .utils import object_depth

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)

MAX_PATCH_DEPTH = 2


@dataclass
class CascadeReport:
    """Outcome of a cascade fan-out.

    Attributes:
        patched: Ids of entities successfully patched
        failed: Ids of entities whose patch failed, with the error
    """

    patched: List[str] = field(default_factory=list)
    failed: Dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def merge(self, other: CascadeReport) -> CascadeReport:
        return CascadeReport(
            patched=[*self.patched, *other.patched],
            failed={**self.failed, **other.failed},
        )


async def fan_out_patches(
    target: EntityCollection[Any],
    patches: Dict[str, Dict[str, Any]],
) -> CascadeReport:
    """Apply patches to a sibling collection concurrently, best-effort.

    Every patch goes through the target's public patch() with
    update_connections disabled so the cascade never re-triggers itself.

    Args:
        target: Collection owning the entities to patch
        patches: Partial updates keyed by entity id

    Returns:
        CascadeReport listing patched and failed ids
    """
    report = CascadeReport()
    if not patches:
        return report

    entity_ids = list(patches)
    results = await asyncio.gather(
        *(
            target.patch(entity_id, patches[entity_id], update_connections=False)
            for entity_id in entity_ids
        ),
        return_exceptions=True,
    )

    for entity_id, result in zip(entity_ids, results):
        if isinstance(result, Exception):
            logger.warning(
                f"Cascade patch of {target.name.value}/{entity_id} failed: {result}"
            )
            report.failed[entity_id] = result
        elif isinstance(result, BaseException):
            raise result
        else:
            report.patched.append(entity_id)

    if report.patched:
        logger.debug(f"Cascade patched {target.name.value}: {report.patched}")
    return report


class EntityCollection(Generic[T]):
    """Cached, synchronized collection of one entity type.

    Either instantiate this class directly or extend it:

    Example:
        >>> class SourcesCollection(EntityCollection[Source]):
        ...     name = CollectionName.SOURCES
        ...     entity_type = Source
        >>> sources = SourcesCollection(client)
        >>> await sources.pull_all(full_page_load=True)
        >>> sources.get("src_1")

    Attributes:
        name: Remote collection name
        entity_type: Model class of the entities
        requires_caller_id: Whether add() needs the id set by the caller
    """

    name: ClassVar[CollectionName]
    entity_type: ClassVar[Type[Entity]]
    requires_caller_id: ClassVar[bool] = False

    def __init__(
        self,
        client: RemoteCollectionClient,
        *,
        hide_elements: Optional[Callable[[T], bool]] = None,
    ) -> None:
        """Initialize the collection.

        Args:
            client: Remote client scoped to this collection
            hide_elements: Predicate excluding entities from ``list``
        """
        self._client = client
        self._entities: List[T] = []
        self._status = StatusTracker()
        self._hide_elements = hide_elements

    # -- read surface ----------------------------------------------------

    @property
    def list(self) -> List[T]:
        """Visible entities."""
        if self._hide_elements is None:
            return [*self._entities]
        return [e for e in self._entities if not self._hide_elements(e)]

    @property
    def list_hidden(self) -> List[T]:
        """Entities excluded from ``list``."""
        if self._hide_elements is None:
            return []
        return [e for e in self._entities if self._hide_elements(e)]

    @property
    def list_include_hidden(self) -> List[T]:
        """Every cached entity."""
        return [*self._entities]

    @property
    def status(self) -> CollectionStatus:
        return self._status.status

    @property
    def error_message(self) -> str:
        return self._status.error_message

    @property
    def client(self) -> RemoteCollectionClient:
        return self._client

    def get(self, entity_id: str) -> Optional[T]:
        """Find a visible entity by id; None if absent or hidden."""
        for entity in self.list:
            if entity.entity_id == entity_id:
                return entity
        return None

    def get_any(self, entity_id: str) -> Optional[T]:
        """Find an entity by id, hidden ones included."""
        for entity in self._entities:
            if entity.entity_id == entity_id:
                return entity
        return None

    # -- synchronization -------------------------------------------------

    async def pull_all(self, full_page_load: bool = False) -> None:
        """Replace the cached list with the remote collection.

        Failures are recorded (status ERROR, error_message) rather than raised;
        the previous list stays available.

        Args:
            full_page_load: Report LOADING_FULL instead of LOADING_BACKGROUND
        """
        with self._status.operation(full_page_load):
            try:
                rows = await self._client.get_all()
                entities = [self._coerce(row) for row in rows or []]
            except Exception as e:
                error = FetchError(
                    f"Failed to fetch {self.name.value}: {e}",
                    collection=self.name.value,
                )
                logger.error(error.message)
                self._status.record_error(error.message)
                return

            self._entities = entities
            self._status.clear_error()
            logger.debug(f"Pulled {len(entities)} {self.name.value}")

    async def add(self, entity: Union[T, Dict[str, Any]]) -> T:
        """Create an entity remotely, then cache the server's version.

        Raises:
            MissingIdError: If the collection needs a caller id and none is set
            RemoteWriteError: If the server returned no entity
            RemoteCollectionError: If the remote call failed
        """
        entity = self._coerce(entity)
        with self._mutation("add", entity.entity_id):
            if self.requires_caller_id and not entity.entity_id:
                raise MissingIdError(self.name.value, entity.id_field)

            stored = await self._client.add(entity.to_wire())
            if not stored:
                raise RemoteWriteError(
                    f"{self.name.value} store failed to add a new entity: {entity.to_wire()}",
                    collection=self.name.value,
                )
            added = self._coerce(stored)
            if not added.entity_id:
                raise RemoteWriteError(
                    f"{self.name.value} store received an entity without "
                    f"'{added.id_field}' from the server",
                    collection=self.name.value,
                )

            self._entities = [*self._entities, added]
            logger.debug(f"Added {self.name.value}/{added.entity_id}")
            await self._after_add(added)
            return added

    async def patch(
        self,
        entity_id: str,
        partial: Dict[str, Any],
        update_connections: bool = True,
    ) -> T:
        """Shallow-merge a partial update, remote first.

        Args:
            entity_id: Id of the cached entity
            partial: Fields to update (attribute or wire names)
            update_connections: Run relationship maintenance afterwards

        Raises:
            PatchTooDeepError: If partial nests deeper than MAX_PATCH_DEPTH
            NotFoundError: If entity_id is not cached
            InvalidPatchError: If partial changes the id or fails validation
            RemoteCollectionError: If the remote call failed
        """
        with self._mutation("patch", entity_id):
            depth = object_depth(partial)
            if depth > MAX_PATCH_DEPTH:
                raise PatchTooDeepError(depth, MAX_PATCH_DEPTH)
            wire_partial = self.entity_type.wire_patch(partial)
            id_field = self.name.id_field
            if id_field in wire_partial and wire_partial[id_field] != entity_id:
                raise InvalidPatchError(
                    f"{self.name.value}/{entity_id}: '{id_field}' cannot be changed",
                    collection=self.name.value,
                    entity_id=entity_id,
                )
            self._merge(self._require_cached(entity_id), partial)

            await self._client.patch(entity_id, wire_partial)

            # The cached entity may have changed during the await
            updated = self._merge(self._require_cached(entity_id), partial)
            self._swap(entity_id, updated)
            logger.debug(f"Patched {self.name.value}/{entity_id}: {sorted(partial)}")
            if update_connections:
                await self._after_update([updated])
            return updated

    async def replace(
        self,
        entity: Union[T, Dict[str, Any]],
        update_connections: bool = True,
    ) -> T:
        """Overwrite a cached entity, remote first.

        Raises:
            NotFoundError: If no cached entity has the same id
            RemoteCollectionError: If the remote call failed
        """
        entity = self._coerce(entity)
        entity_id = entity.entity_id
        with self._mutation("replace", entity_id):
            self._require_cached(entity_id)

            await self._client.replace(entity_id, entity.to_wire())

            self._swap(entity_id, entity)
            logger.debug(f"Replaced {self.name.value}/{entity_id}")
            if update_connections:
                await self._after_update([entity])
            return entity

    async def delete(self, entity_id: str) -> CascadeReport:
        """Delete an entity remotely, drop it locally, then cascade.

        The remote delete is issued even when entity_id is not cached, so a
        collection that was never pulled still deletes. The cascade then
        prunes any sibling links that still name the id.

        Returns:
            Report of the cascade patches issued to sibling collections
        """
        with self._mutation("delete", entity_id):
            await self._client.delete(entity_id)

            if self.get_any(entity_id) is None:
                logger.debug(f"Deleted {self.name.value}/{entity_id} (not cached)")
            else:
                self._entities = [e for e in self._entities if e.entity_id != entity_id]
                logger.debug(f"Deleted {self.name.value}/{entity_id}")
            return await self._after_delete(entity_id)

    # -- relationship hooks ----------------------------------------------

    async def _after_add(self, entity: T) -> CascadeReport:
        return CascadeReport()

    async def _after_update(self, entities: List[T]) -> CascadeReport:
        return CascadeReport()

    async def _after_delete(self, entity_id: str) -> CascadeReport:
        return CascadeReport()

    # -- internals -------------------------------------------------------

    @contextmanager
    def _mutation(self, operation: str, entity_id: Optional[str]) -> Iterator[None]:
        with self._status.operation():
            try:
                yield
            except Exception as e:
                logger.error(
                    f"{self.name.value}: {operation} of '{entity_id or ''}' failed: {e}"
                )
                raise

    def _coerce(self, entity: Union[T, Dict[str, Any]]) -> T:
        if isinstance(entity, self.entity_type):
            return entity  # type: ignore[return-value]
        if isinstance(entity, Entity):
            return self.entity_type.from_wire(entity.to_wire())  # type: ignore[return-value]
        return self.entity_type.from_wire(entity)  # type: ignore[return-value]

    def _merge(self, entity: T, partial: Dict[str, Any]) -> T:
        try:
            return entity.merged(partial)  # type: ignore[return-value]
        except ValidationError as e:
            raise InvalidPatchError(
                f"{self.name.value}/{entity.entity_id}: invalid patch: {e}",
                collection=self.name.value,
                entity_id=entity.entity_id,
            ) from e

    def _require_cached(self, entity_id: str) -> T:
        entity = self.get_any(entity_id)
        if entity is None:
            raise NotFoundError(
                f"{self.name.value}/{entity_id} is not in the local cache",
                collection=self.name.value,
                entity_id=entity_id,
            )
        return entity

    def _swap(self, entity_id: str, entity: T) -> None:
        self._entities = [
            entity if existing.entity_id == entity_id else existing
            for existing in self._entities
        ]
