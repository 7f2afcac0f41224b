"""
Unit tests for the collection status machine.

Tests cover:
- Loading states for full and background operations
- Sticky pull error
- Overlapping operations
"""

import pytest

from configstore.status import CollectionStatus, StatusTracker


class TestStatusTracker:
    """Tests for StatusTracker."""

    @pytest.fixture
    def tracker(self):
        return StatusTracker()

    def test_initial_idle(self, tracker):
        assert tracker.status is CollectionStatus.IDLE
        assert tracker.error_message == ""

    def test_full_page_load(self, tracker):
        with tracker.operation(full_page_load=True):
            assert tracker.status is CollectionStatus.LOADING_FULL
        assert tracker.status is CollectionStatus.IDLE

    def test_background_operation(self, tracker):
        with tracker.operation():
            assert tracker.status is CollectionStatus.LOADING_BACKGROUND
        assert tracker.status is CollectionStatus.IDLE

    def test_operation_released_on_exception(self, tracker):
        """Loading state is left even when the block raises."""
        with pytest.raises(RuntimeError):
            with tracker.operation():
                raise RuntimeError("boom")

        assert tracker.status is CollectionStatus.IDLE
        assert tracker.in_flight == 0

    def test_error_is_sticky(self, tracker):
        tracker.record_error("Failed to fetch sources: timeout")

        assert tracker.status is CollectionStatus.ERROR

        with tracker.operation():
            assert tracker.status is CollectionStatus.LOADING_BACKGROUND
        assert tracker.status is CollectionStatus.ERROR
        assert tracker.error_message == "Failed to fetch sources: timeout"

    def test_clear_error(self, tracker):
        tracker.record_error("boom")
        tracker.clear_error()

        assert tracker.status is CollectionStatus.IDLE
        assert tracker.error_message == ""

    def test_overlapping_operations(self, tracker):
        """Status stays loading until the last operation finishes."""
        with tracker.operation():
            with tracker.operation():
                assert tracker.in_flight == 2
            assert tracker.status is CollectionStatus.LOADING_BACKGROUND
        assert tracker.status is CollectionStatus.IDLE

    def test_full_load_wins_over_background(self, tracker):
        with tracker.operation():
            with tracker.operation(full_page_load=True):
                assert tracker.status is CollectionStatus.LOADING_FULL
            assert tracker.status is CollectionStatus.LOADING_BACKGROUND
