"""
Unit tests for collection helpers.
"""

import pytest

from configstore.utils import object_depth, random_id, to_list, union, without


class TestObjectDepth:
    """Tests for object_depth."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1, 0),
            ("text", 0),
            (None, 0),
            ({}, 0),
            ({"comment": "x"}, 1),
            ({"only_keys": []}, 1),
            ({"only_keys": ["k1"]}, 2),
            ({"config": {"host": "db"}}, 2),
            ({"a": {"b": {"c": 1}}}, 3),
            ({"config": {"hosts": ["a"]}}, 3),
        ],
    )
    def test_depth(self, value, expected):
        assert object_depth(value) == expected

    def test_depth_uses_deepest_branch(self):
        """Shallow siblings do not hide a deep branch."""
        assert object_depth({"a": 1, "b": {"c": {"d": 1}}}) == 3


class TestListHelpers:
    """Tests for to_list, without and union."""

    def test_to_list_wraps_single(self):
        assert to_list("s1") == ["s1"]

    def test_to_list_copies_list(self):
        items = ["a", "b"]
        result = to_list(items)
        assert result == items
        assert result is not items

    def test_to_list_none(self):
        assert to_list(None) == []

    def test_without_keeps_order(self):
        assert without(["a", "b", "c", "b"], "b") == ["a", "c"]

    def test_without_handles_none(self):
        assert without(None, "a") == []

    def test_union_appends_unseen(self):
        assert union(["k2", "k1"], ["k1", "k3"]) == ["k2", "k1", "k3"]


class TestRandomId:
    """Tests for random_id."""

    def test_length(self):
        assert len(random_id(6)) == 6

    def test_alphabet(self):
        token = random_id(64)
        assert token.isalnum()
        assert token == token.lower()

    def test_tokens_differ(self):
        assert random_id() != random_id()
