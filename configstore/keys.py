"""
Keys collection.

Keys are the only entities whose ids are generated client-side. Each key
gets three independent tokens: ``uid``, ``server_auth`` (``s2s.`` prefix)
and ``js_auth`` (``js.`` prefix).

Keys store no reverse links; a key is linked iff some Sink.only_keys lists
its uid. Deleting a key therefore prunes it from every sink.

Invariants:
    - After delete(uid) succeeds, no sink lists uid in only_keys
      (unless an individual sink patch failed and was reported)
    - The cascade never touches Sink.sources
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from .collection import CascadeReport, EntityCollection, fan_out_patches
from .links import prune_links
from .models import CollectionName, Key
from .remote import RemoteCollectionClient
from .utils import random_id

if TYPE_CHECKING:
    from .sinks import SinksCollection

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LENGTH = 24
KEY_UID_LENGTH = 6


class KeysCollection(EntityCollection[Key]):
    """Collection of API keys.

    Example:
        >>> keys = KeysCollection(client, project_id="proj1")
        >>> key = await keys.add(comment="website")
        >>> key.js_auth
        'js.proj1.8f2k...'
    """

    name = CollectionName.KEYS
    entity_type = Key
    requires_caller_id = True

    def __init__(
        self,
        client: RemoteCollectionClient,
        project_id: str,
        sinks: Optional[SinksCollection] = None,
        token_length: int = DEFAULT_TOKEN_LENGTH,
    ) -> None:
        super().__init__(client)
        self.project_id = project_id
        self.token_length = token_length
        self._sinks = sinks

    def inject_sinks(self, sinks: SinksCollection) -> None:
        self._sinks = sinks

    @property
    def has_keys(self) -> bool:
        return bool(self.list_include_hidden)

    @property
    def first_linked_key(self) -> Optional[Key]:
        """First key referenced by any sink, if any."""
        if self._sinks is None:
            return None
        for sink in self._sinks.list_include_hidden:
            if sink.only_keys:
                return self.get(sink.only_keys[0])
        return None

    def generate_token(self, prefix: str, length: Optional[int] = None) -> str:
        """Build ``prefix.project_id.random`` (prefix omitted when empty)."""
        postfix = f"{self.project_id}.{random_id(length or self.token_length)}"
        return f"{prefix}.{postfix}" if prefix else postfix

    def generate_key(self, comment: Optional[str] = None) -> Key:
        return Key(
            uid=self.generate_token("", KEY_UID_LENGTH),
            server_auth=self.generate_token("s2s"),
            js_auth=self.generate_token("js"),
            comment=comment,
            origins=[],
        )

    async def add(  # type: ignore[override]
        self,
        key: Union[Key, Dict[str, Any], None] = None,
        **fields: Any,
    ) -> Key:
        """Generate tokens, apply caller overrides, and create the key.

        Args:
            key: Optional partial key whose set fields override generated ones
            **fields: Further overrides (e.g. comment, origins)
        """
        overrides: Dict[str, Any] = {}
        if isinstance(key, Key):
            overrides.update(key.model_dump(exclude_unset=True))
        elif key:
            overrides.update(key)
        overrides.update(fields)

        comment = overrides.get("comment")
        new_key = self.generate_key(comment).merged(overrides)
        return await super().add(new_key)

    async def generate_add_initial_key_if_needed(
        self,
        comment: Optional[str] = None,
    ) -> Optional[Key]:
        """Create one default key when the collection is empty.

        Returns:
            The created key, or None when keys already exist
        """
        if self.has_keys:
            return None
        logger.info(f"No keys in project {self.project_id}; creating the initial key")
        return await self.add(comment=comment)

    async def _after_delete(self, entity_id: str) -> CascadeReport:
        if self._sinks is None:
            logger.warning("Keys collection has no sinks collection wired; links not updated")
            return CascadeReport()
        patches = prune_links(
            self._sinks.list_include_hidden,
            links_field="only_keys",
            removed_ids=[entity_id],
        )
        return await fan_out_patches(self._sinks, patches)
