"""
Sinks (destinations) collection.

Sinks carry two denormalized link lists:
- only_keys: Key uids allowed to write into the sink
- sources: Source ids feeding the sink (mirrored by Source.destinations)

Invariants:
    - Hidden sink types (per the reference catalog) stay in the same list;
      only the ``list`` view filters them out
    - Link maintenance always scans the full list, hidden sinks included
    - Edits to Sink.sources are mirrored into Source.destinations unless
      the caller opts out with update_connections=False
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, List, Mapping, Optional, Protocol, Union, runtime_checkable

from .collection import CascadeReport, EntityCollection, fan_out_patches
from .links import align_mirrored_links, extend_links, prune_links, reconcile_membership
from .models import CollectionName, Entity, Sink
from .remote import RemoteCollectionClient
from .utils import to_list

if TYPE_CHECKING:
    from .sources import SourcesCollection

logger = logging.getLogger(__name__)


@runtime_checkable
class ReferenceCatalog(Protocol):
    """Lookup classifying sink types as hidden or visible."""

    def is_hidden(self, sink_type: str) -> bool:
        ...


class StaticReferenceCatalog:
    """Reference catalog backed by a ``{type: {"hidden": bool}}`` mapping.

    Types missing from the mapping are visible.
    """

    def __init__(self, entries: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._entries = dict(entries or {})

    def is_hidden(self, sink_type: str) -> bool:
        return bool(self._entries.get(sink_type, {}).get("hidden", False))


def _ids(values: Union[str, Entity, Iterable[Union[str, Entity]]]) -> List[str]:
    return [v.entity_id if isinstance(v, Entity) else v for v in to_list(values)]


class SinksCollection(EntityCollection[Sink]):
    """Collection of sinks with key and source link maintenance.

    Example:
        >>> sinks = SinksCollection(client, catalog=StaticReferenceCatalog({"internal": {"hidden": True}}))
        >>> await sinks.pull_all()
        >>> await sinks.link_keys_to_sinks(["k1"], ["d1"])
    """

    name = CollectionName.SINKS
    entity_type = Sink

    def __init__(
        self,
        client: RemoteCollectionClient,
        catalog: Optional[ReferenceCatalog] = None,
        sources: Optional[SourcesCollection] = None,
    ) -> None:
        self._catalog: ReferenceCatalog = catalog or StaticReferenceCatalog()
        super().__init__(client, hide_elements=self._is_hidden)
        self._sources = sources

    def _is_hidden(self, sink: Sink) -> bool:
        return self._catalog.is_hidden(sink.type)

    def inject_sources(self, sources: SourcesCollection) -> None:
        self._sources = sources

    @property
    def has_sinks(self) -> bool:
        return bool(self.list_include_hidden)

    # -- Key <-> Sink ----------------------------------------------------

    async def update_links_to_key(
        self,
        key_uid: str,
        desired_sink_uids: Iterable[str],
    ) -> CascadeReport:
        """Link key_uid to exactly the desired sinks.

        Only sinks whose membership changes are patched.
        """
        patches = reconcile_membership(
            self.list_include_hidden,
            links_field="only_keys",
            target_id=key_uid,
            desired_ids=desired_sink_uids,
        )
        return await fan_out_patches(self, patches)

    async def link_keys_to_sinks(
        self,
        keys: Union[str, Entity, Iterable[Union[str, Entity]]],
        sinks: Union[str, Entity, Iterable[Union[str, Entity]]],
    ) -> CascadeReport:
        """Add keys to the only_keys of the named sinks. Never unlinks."""
        patches = extend_links(
            self.list_include_hidden,
            links_field="only_keys",
            added_ids=_ids(keys),
            only_ids=_ids(sinks),
        )
        return await fan_out_patches(self, patches)

    # -- Sink -> Source ------------------------------------------------

    async def patch_source_links_from_sink_change(
        self,
        updated_sinks: Union[Sink, Iterable[Sink]],
    ) -> CascadeReport:
        """Mirror Sink.sources into Source.destinations for the updated sinks."""
        if self._sources is None:
            logger.warning("Sinks collection has no sources collection wired; links not updated")
            return CascadeReport()
        patches = align_mirrored_links(
            to_list(updated_sinks),
            self._sources.list_include_hidden,
            declared_field="sources",
            mirror_field="destinations",
        )
        return await fan_out_patches(self._sources, patches)

    async def unlink_deleted_sinks_from_sources(
        self,
        sink_uids: Union[str, Iterable[str]],
    ) -> CascadeReport:
        """Remove deleted sink uids from every Source.destinations."""
        if self._sources is None:
            logger.warning("Sinks collection has no sources collection wired; links not updated")
            return CascadeReport()
        patches = prune_links(
            self._sources.list_include_hidden,
            links_field="destinations",
            removed_ids=to_list(sink_uids),
        )
        return await fan_out_patches(self._sources, patches)

    async def _after_add(self, entity: Sink) -> CascadeReport:
        return await self.patch_source_links_from_sink_change(entity)

    async def _after_update(self, entities: List[Sink]) -> CascadeReport:
        return await self.patch_source_links_from_sink_change(entities)

    async def _after_delete(self, entity_id: str) -> CascadeReport:
        return await self.unlink_deleted_sinks_from_sources(entity_id)
