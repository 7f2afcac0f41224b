"""
Orphan detection across keys, sinks and sources.

Derives user-facing warnings from the public read surface of the three
collections. Nothing here mutates a collection.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

from .keys import KeysCollection
from .models import CollectionName
from .sinks import SinksCollection
from .sources import SourcesCollection

logger = logging.getLogger(__name__)


class OrphanKind(Enum):
    KEY_UNLINKED = "key_unlinked"
    SINK_UNLINKED = "sink_unlinked"
    SOURCE_UNLINKED = "source_unlinked"
    DANGLING_REFERENCE = "dangling_reference"


@dataclass(frozen=True)
class OrphanWarning:
    """A single warning about an entity lacking a counterpart.

    Attributes:
        kind: What is wrong
        collection: Collection holding the entity
        entity_id: Id of the entity
        message: Human-readable description
    """

    kind: OrphanKind
    collection: CollectionName
    entity_id: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "collection": self.collection.value,
            "entity_id": self.entity_id,
            "message": self.message,
        }


class OrphanDetector:
    """Scans the three collections for unlinked entities and broken links.

    Example:
        >>> detector = OrphanDetector(keys, sinks, sources)
        >>> for warning in detector.scan():
        ...     print(warning.message)
    """

    def __init__(
        self,
        keys: KeysCollection,
        sinks: SinksCollection,
        sources: SourcesCollection,
    ) -> None:
        self._keys = keys
        self._sinks = sinks
        self._sources = sources

    def scan(self) -> List[OrphanWarning]:
        keys = self._keys.list_include_hidden
        sinks = self._sinks.list_include_hidden
        sources = self._sources.list_include_hidden

        key_ids = {k.uid for k in keys}
        sink_ids = {s.uid for s in sinks}
        source_ids = {s.id for s in sources}
        linked_keys = {uid for sink in sinks for uid in sink.only_keys}

        warnings: List[OrphanWarning] = []

        for key in keys:
            if key.uid not in linked_keys:
                warnings.append(
                    OrphanWarning(
                        OrphanKind.KEY_UNLINKED,
                        CollectionName.KEYS,
                        key.uid,
                        f"Key {key.uid} is not linked to any destination",
                    )
                )

        for sink in sinks:
            if not sink.only_keys and not sink.sources:
                warnings.append(
                    OrphanWarning(
                        OrphanKind.SINK_UNLINKED,
                        CollectionName.SINKS,
                        sink.uid,
                        f"Destination {sink.uid} has no keys and no sources",
                    )
                )
            for uid in sink.only_keys:
                if uid not in key_ids:
                    warnings.append(self._dangling(CollectionName.SINKS, sink.uid, "key", uid))
            for source_id in sink.sources:
                if source_id not in source_ids:
                    warnings.append(self._dangling(CollectionName.SINKS, sink.uid, "source", source_id))

        for source in sources:
            if not source.destinations:
                warnings.append(
                    OrphanWarning(
                        OrphanKind.SOURCE_UNLINKED,
                        CollectionName.SOURCES,
                        source.id,
                        f"Source {source.id} has no destinations",
                    )
                )
            for uid in source.destinations:
                if uid not in sink_ids:
                    warnings.append(self._dangling(CollectionName.SOURCES, source.id, "destination", uid))

        if warnings:
            logger.debug(f"Orphan scan found {len(warnings)} warnings")
        return warnings

    def has_warnings(self) -> bool:
        return bool(self.scan())

    def by_kind(self) -> Dict[OrphanKind, List[OrphanWarning]]:
        grouped: Dict[OrphanKind, List[OrphanWarning]] = defaultdict(list)
        for warning in self.scan():
            grouped[warning.kind].append(warning)
        return dict(grouped)

    @staticmethod
    def _dangling(
        collection: CollectionName,
        entity_id: str,
        target: str,
        target_id: str,
    ) -> OrphanWarning:
        return OrphanWarning(
            OrphanKind.DANGLING_REFERENCE,
            collection,
            entity_id,
            f"{collection.value}/{entity_id} references missing {target} {target_id}",
        )
