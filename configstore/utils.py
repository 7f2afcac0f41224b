"""
Small helpers shared by the collections.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

T = TypeVar("T")

_ID_ALPHABET = string.ascii_lowercase + string.digits


def object_depth(value: Any) -> int:
    """Nesting depth of a JSON-like value.

    Mappings and sequences (except strings and bytes) count as one level;
    scalars and empty containers are depth 0.

    Example:
        >>> object_depth({"a": {"b": {"c": 1}}})
        3
        >>> object_depth({"only_keys": ["k1"]})
        2
    """
    if isinstance(value, Mapping):
        children = list(value.values())
    elif isinstance(value, (list, tuple, set)):
        children = list(value)
    else:
        return 0
    return 1 + max([-1, *(object_depth(child) for child in children)])


def to_list(value: T | Iterable[T] | None) -> list[T]:
    """Wrap a single item in a list; lists and tuples are copied."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]  # type: ignore[list-item]


def random_id(length: int = 24) -> str:
    """Random lowercase alphanumeric token."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def without(items: Iterable[str] | None, *removed: str) -> list[str]:
    """Copy of items with every occurrence of removed dropped, order kept."""
    drop = set(removed)
    return [item for item in (items or []) if item not in drop]


def union(items: Iterable[str] | None, added: Iterable[str]) -> list[str]:
    """Order-preserving set union: items first, then unseen additions."""
    result: list[str] = []
    seen: set[str] = set()
    for item in [*(items or []), *added]:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
