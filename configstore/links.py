"""
Link reconciliation for denormalized relationships.

Pure functions computing the patches that bring link lists into agreement.
They never touch a collection; callers hand the result to fan_out_patches().

Invariants:
    - A patch is produced only for entities whose membership must change
    - Each affected entity gets exactly one patch, even when several
      updated entities touch it
    - Link order is preserved; additions are appended
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .models import Entity
from .utils import union, without


def _links(entity: Entity, links_field: str) -> List[str]:
    return list(getattr(entity, links_field, None) or [])


def reconcile_membership(
    entities: Iterable[Entity],
    *,
    links_field: str,
    target_id: str,
    desired_ids: Iterable[str],
) -> Dict[str, Dict[str, Any]]:
    """Make exactly the desired entities list target_id in links_field.

    Example:
        >>> reconcile_membership(sinks, links_field="only_keys",
        ...                      target_id="k1", desired_ids=["d1"])
        {'d1': {'only_keys': ['k1']}}
    """
    desired = set(desired_ids)
    patches: Dict[str, Dict[str, Any]] = {}
    for entity in entities:
        current = _links(entity, links_field)
        is_linked = target_id in current
        should_be_linked = entity.entity_id in desired
        if is_linked == should_be_linked:
            continue
        if should_be_linked:
            patches[entity.entity_id] = {links_field: [*current, target_id]}
        else:
            patches[entity.entity_id] = {links_field: without(current, target_id)}
    return patches


def prune_links(
    entities: Iterable[Entity],
    *,
    links_field: str,
    removed_ids: Iterable[str],
) -> Dict[str, Dict[str, Any]]:
    """Drop removed ids from every entity listing any of them."""
    removed = list(removed_ids)
    patches: Dict[str, Dict[str, Any]] = {}
    for entity in entities:
        current = _links(entity, links_field)
        if not set(current) & set(removed):
            continue
        patches[entity.entity_id] = {links_field: without(current, *removed)}
    return patches


def extend_links(
    entities: Iterable[Entity],
    *,
    links_field: str,
    added_ids: Iterable[str],
    only_ids: Iterable[str],
) -> Dict[str, Dict[str, Any]]:
    """Add ids to the links of the named entities (additive only)."""
    added = list(added_ids)
    named = set(only_ids)
    patches: Dict[str, Dict[str, Any]] = {}
    for entity in entities:
        if entity.entity_id not in named:
            continue
        current = _links(entity, links_field)
        merged = union(current, added)
        if merged != current:
            patches[entity.entity_id] = {links_field: merged}
    return patches


def align_mirrored_links(
    updated: Iterable[Entity],
    targets: Iterable[Entity],
    *,
    declared_field: str,
    mirror_field: str,
) -> Dict[str, Dict[str, Any]]:
    """Make targets' mirror lists agree with the updated entities' declarations.

    For every updated entity U and target D, ``D.id in U.<declared_field>``
    must hold exactly when ``U.id in D.<mirror_field>``. The updated side
    is the source of truth.

    Args:
        updated: Entities whose declared links changed
        targets: Every entity of the other collection (hidden included)
        declared_field: Link list on the updated entities
        mirror_field: Link list on the targets

    Returns:
        Patches keyed by target id
    """
    targets = list(targets)
    pending: Dict[str, List[str]] = {}
    for entity in updated:
        declared = set(_links(entity, declared_field))
        for target in targets:
            current = pending.get(target.entity_id, _links(target, mirror_field))
            is_linked = entity.entity_id in current
            should_be_linked = target.entity_id in declared
            if is_linked == should_be_linked:
                continue
            if should_be_linked:
                pending[target.entity_id] = [*current, entity.entity_id]
            else:
                pending[target.entity_id] = without(current, entity.entity_id)
    return {target_id: {mirror_field: links} for target_id, links in pending.items()}
