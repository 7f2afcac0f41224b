"""
Entity models for the configuration store.

Three entity types are synchronized with the remote configuration service:
- Key: credentials used by clients to write events
- Sink: a destination receiving events
- Source: a connector pulling data into sinks

Python attributes are snake_case; the wire format is camelCase. Unknown
fields are preserved so type-specific configuration survives round trips.

Invariants:
    - Sink.only_keys and Sink.sources, Source.destinations are the
      denormalized link lists kept consistent by the collections
    - Models are treated as immutable once cached; updates build new instances
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CollectionName(str, Enum):
    """Remote collection names."""

    KEYS = "api_keys"
    SINKS = "destinations"
    SOURCES = "sources"

    @property
    def id_field(self) -> str:
        """Wire name of the id attribute for this collection."""
        return "id" if self is CollectionName.SOURCES else "uid"


class Entity(BaseModel):
    """Base model for all stored entities.

    Subclasses set ``id_field`` to the attribute holding the unique id.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id_field: ClassVar[str] = "id"

    @property
    def entity_id(self) -> str:
        return getattr(self, self.id_field) or ""

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the remote (camelCase) representation."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> Entity:
        return cls.model_validate(data)

    @classmethod
    def wire_patch(cls, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Translate a partial update keyed by attribute names to wire names.

        Keys that are already wire names, or unknown extras, pass through.
        """
        result: Dict[str, Any] = {}
        for key, value in partial.items():
            info = cls.model_fields.get(key)
            name = (info.alias or key) if info is not None else key
            result[name] = value
        return result

    def merged(self, partial: Dict[str, Any]) -> Entity:
        """New entity with partial shallow-merged over this one."""
        return type(self).model_validate({**self.to_wire(), **type(self).wire_patch(partial)})


class Key(Entity):
    """API key pair (server-to-server and browser tokens).

    Only ``comment`` and ``origins`` change after creation.
    """

    id_field: ClassVar[str] = "uid"

    uid: str = ""
    server_auth: str = ""
    js_auth: str = ""
    comment: Optional[str] = None
    origins: List[str] = Field(default_factory=list)


class Sink(Entity):
    """Destination for events.

    Attributes:
        uid: Unique id
        type: Destination type, classified hidden/visible by the catalog
        only_keys: Key uids allowed to write here
        sources: Source ids feeding this sink
    """

    id_field: ClassVar[str] = "uid"

    uid: str = ""
    type: str
    only_keys: List[str] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)


class Source(Entity):
    """Data source connector."""

    id_field: ClassVar[str] = "id"

    id: str = ""
    destinations: List[str] = Field(default_factory=list)
    schedule: str = ""
    config: Dict[str, Any] = Field(default_factory=dict)
