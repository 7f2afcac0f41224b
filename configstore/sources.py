"""
Sources collection.

Source.destinations and Sink.sources list the same relationship. After a
source is added, replaced or patched, the sinks are corrected so both views
agree; the source side is the source of truth in this direction.

Invariants:
    - Exactly one patch per sink needing correction, none for sinks that agree
    - Deleting a source removes its id from every Sink.sources
    - Corrections are best-effort: a failed sink patch is logged and reported
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional, Union

from .collection import CascadeReport, EntityCollection, fan_out_patches
from .links import align_mirrored_links, prune_links
from .models import CollectionName, Source
from .remote import RemoteCollectionClient
from .utils import to_list

if TYPE_CHECKING:
    from .sinks import SinksCollection

logger = logging.getLogger(__name__)


class SourcesCollection(EntityCollection[Source]):
    """Collection of sources keeping Sink.sources in sync."""

    name = CollectionName.SOURCES
    entity_type = Source

    def __init__(
        self,
        client: RemoteCollectionClient,
        sinks: Optional[SinksCollection] = None,
    ) -> None:
        super().__init__(client)
        self._sinks = sinks

    def inject_sinks(self, sinks: SinksCollection) -> None:
        self._sinks = sinks

    @property
    def has_sources(self) -> bool:
        return bool(self.list_include_hidden)

    async def patch_sink_links_from_source_change(
        self,
        updated_sources: Union[Source, Iterable[Source]],
    ) -> CascadeReport:
        """Correct Sink.sources so it agrees with each Source.destinations.

        Args:
            updated_sources: One or more sources whose destinations changed

        Returns:
            Report of the sink patches issued
        """
        if self._sinks is None:
            logger.warning("Sources collection has no sinks collection wired; links not updated")
            return CascadeReport()
        patches = align_mirrored_links(
            to_list(updated_sources),
            self._sinks.list_include_hidden,
            declared_field="destinations",
            mirror_field="sources",
        )
        return await fan_out_patches(self._sinks, patches)

    async def unlink_deleted_sources_from_sinks(
        self,
        source_ids: Union[str, Iterable[str]],
    ) -> CascadeReport:
        """Remove deleted source ids from every Sink.sources."""
        if self._sinks is None:
            logger.warning("Sources collection has no sinks collection wired; links not updated")
            return CascadeReport()
        patches = prune_links(
            self._sinks.list_include_hidden,
            links_field="sources",
            removed_ids=to_list(source_ids),
        )
        return await fan_out_patches(self._sinks, patches)

    async def _after_add(self, entity: Source) -> CascadeReport:
        return await self.patch_sink_links_from_source_change(entity)

    async def _after_update(self, entities: List[Source]) -> CascadeReport:
        return await self.patch_sink_links_from_source_change(entities)

    async def _after_delete(self, entity_id: str) -> CascadeReport:
        return await self.unlink_deleted_sources_from_sinks(entity_id)
