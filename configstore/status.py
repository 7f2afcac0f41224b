"""
Collection status machine.

States:
    IDLE               initial, and between operations
    LOADING_FULL       a full page pull is in flight (UI should block)
    LOADING_BACKGROUND a background pull or a mutation is in flight
    ERROR              the last bulk pull failed (sticky)

Invariants:
    - Only bulk pulls enter or leave ERROR; mutations never touch it
    - ERROR is cleared only by the next successful bulk pull
    - Every operation leaves the loading state on exit, success or failure
    - Overlapping operations are counted, so the status never reads IDLE
      while any operation is still in flight
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

logger = logging.getLogger(__name__)


class CollectionStatus(Enum):
    """Observable state of a collection."""

    IDLE = "IDLE"
    LOADING_FULL = "LOADING_FULL"
    LOADING_BACKGROUND = "LOADING_BACKGROUND"
    ERROR = "ERROR"


class StatusTracker:
    """Tracks in-flight operations and the sticky pull error.

    Example:
        >>> tracker = StatusTracker()
        >>> with tracker.operation(full_page_load=True):
        ...     tracker.status
        <CollectionStatus.LOADING_FULL: 'LOADING_FULL'>
        >>> tracker.status
        <CollectionStatus.IDLE: 'IDLE'>
    """

    def __init__(self) -> None:
        self._full_loads = 0
        self._background_ops = 0
        self._error_message = ""

    @property
    def status(self) -> CollectionStatus:
        if self._full_loads:
            return CollectionStatus.LOADING_FULL
        if self._background_ops:
            return CollectionStatus.LOADING_BACKGROUND
        if self._error_message:
            return CollectionStatus.ERROR
        return CollectionStatus.IDLE

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def in_flight(self) -> int:
        return self._full_loads + self._background_ops

    @contextmanager
    def operation(self, full_page_load: bool = False) -> Iterator[None]:
        """Mark an operation in flight for the duration of the block."""
        if full_page_load:
            self._full_loads += 1
        else:
            self._background_ops += 1
        try:
            yield
        finally:
            if full_page_load:
                self._full_loads -= 1
            else:
                self._background_ops -= 1

    def record_error(self, message: str) -> None:
        """Enter the sticky ERROR state (bulk pulls only)."""
        self._error_message = message or "Unknown error"

    def clear_error(self) -> None:
        """Leave ERROR after a successful bulk pull."""
        if self._error_message:
            logger.debug("Clearing sticky collection error")
        self._error_message = ""
