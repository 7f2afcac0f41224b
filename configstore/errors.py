"""
Error types for the configuration store.

This module defines all exception types raised by the store:
- ConfigStoreError: Base exception
- RemoteCollectionError: Remote client transport/server failure
- RemoteWriteError: Create accepted but nothing usable returned
- NotFoundError: Patch/replace target absent from the cache
- PatchTooDeepError: Patch payload nests deeper than supported
- InvalidPatchError: Patch rejected by the entity model or changing the id
- MissingIdError: Collection requires a caller-assigned id
- FetchError: Bulk pull failed

Invariants:
    - All errors inherit from ConfigStoreError
    - Errors include context for debugging
    - FetchError is recorded in collection state, never raised out of pull_all
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ConfigStoreError(Exception):
    """Base exception for all configuration store errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "CONFIGSTORE_ERROR"
        self.details = details or {}


class RemoteCollectionError(ConfigStoreError):
    """A remote collection call failed.

    Raised by remote client implementations when:
    - The server is unreachable or times out
    - The server answers with a non-2xx status
    - The backend rejects the operation (duplicate id, unknown id)
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(
            message,
            code="REMOTE_ERROR",
            details={
                "collection": collection,
                "operation": operation,
                "status_code": status_code,
            },
        )
        self.collection = collection
        self.operation = operation
        self.status_code = status_code


class RemoteWriteError(ConfigStoreError):
    """The server accepted a create but returned no entity."""

    def __init__(self, message: str, collection: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="REMOTE_WRITE_ERROR",
            details={"collection": collection},
        )
        self.collection = collection


class NotFoundError(ConfigStoreError):
    """Entity not found in the local cache.

    Raised when:
    - replace() targets an entity that was never pulled
    - patch() targets an id absent from the cache
    """

    def __init__(
        self,
        message: str,
        collection: str,
        entity_id: str,
    ) -> None:
        super().__init__(
            message,
            code="NOT_FOUND",
            details={
                "collection": collection,
                "entity_id": entity_id,
            },
        )
        self.collection = collection
        self.entity_id = entity_id


class PatchTooDeepError(ConfigStoreError):
    """Patch payload nesting exceeds what server patch semantics can express."""

    def __init__(self, depth: int, max_depth: int) -> None:
        super().__init__(
            f"Recursive patch is not supported: depth {depth} exceeds {max_depth}",
            code="PATCH_TOO_DEEP",
            details={"depth": depth, "max_depth": max_depth},
        )
        self.depth = depth
        self.max_depth = max_depth


class MissingIdError(ConfigStoreError):
    """Entity has no id but the collection requires caller-assigned ids."""

    def __init__(self, collection: str, id_field: str) -> None:
        super().__init__(
            f"Collection '{collection}' requires a caller-assigned '{id_field}'",
            code="MISSING_ID",
            details={"collection": collection, "id_field": id_field},
        )
        self.collection = collection
        self.id_field = id_field


class FetchError(ConfigStoreError):
    """Bulk pull of a collection failed (network or server)."""

    def __init__(self, message: str, collection: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="FETCH_ERROR",
            details={"collection": collection},
        )
        self.collection = collection


class InvalidPatchError(ConfigStoreError):
    """Patch cannot be applied to the cached entity.

    Raised before any remote call when:
    - The merged entity fails model validation
    - The patch changes the entity id
    """

    def __init__(
        self,
        message: str,
        collection: str,
        entity_id: str,
    ) -> None:
        super().__init__(
            message,
            code="INVALID_PATCH",
            details={
                "collection": collection,
                "entity_id": entity_id,
            },
        )
        self.collection = collection
        self.entity_id = entity_id
