"""
Unit tests for entity models.
"""

from configstore.models import CollectionName, Key, Sink, Source


class TestWireFormat:
    """Tests for camelCase wire serialization."""

    def test_key_to_wire(self):
        key = Key(uid="u1", server_auth="s2s.p.x", js_auth="js.p.y")

        wire = key.to_wire()

        assert wire["serverAuth"] == "s2s.p.x"
        assert wire["jsAuth"] == "js.p.y"
        assert wire["origins"] == []

    def test_sink_from_wire_keeps_extras(self):
        """Type-specific configuration survives a round trip."""
        sink = Sink.from_wire(
            {"uid": "d1", "type": "postgres", "onlyKeys": ["k1"], "host": "db.local"}
        )

        assert sink.only_keys == ["k1"]
        assert sink.to_wire()["host"] == "db.local"

    def test_populate_by_attribute_name(self):
        sink = Sink(uid="d1", type="postgres", only_keys=["k1"])
        assert sink.only_keys == ["k1"]

    def test_entity_id(self):
        assert Key(uid="u1").entity_id == "u1"
        assert Sink(uid="d1", type="s3").entity_id == "d1"
        assert Source(id="s1").entity_id == "s1"


class TestPatching:
    """Tests for wire_patch and merged."""

    def test_wire_patch_maps_attribute_names(self):
        assert Sink.wire_patch({"only_keys": ["k1"], "host": "x"}) == {
            "onlyKeys": ["k1"],
            "host": "x",
        }

    def test_wire_patch_passes_wire_names(self):
        assert Sink.wire_patch({"onlyKeys": []}) == {"onlyKeys": []}

    def test_merged_is_shallow_and_new(self):
        sink = Sink(uid="d1", type="postgres", only_keys=["k1"], sources=["s1"])

        updated = sink.merged({"only_keys": ["k1", "k2"]})

        assert updated.only_keys == ["k1", "k2"]
        assert updated.sources == ["s1"]
        assert sink.only_keys == ["k1"]

    def test_merged_replaces_nested_value(self):
        source = Source(id="s1", config={"a": 1, "b": 2})

        updated = source.merged({"config": {"a": 3}})

        assert updated.config == {"a": 3}


class TestCollectionName:
    def test_id_fields(self):
        assert CollectionName.KEYS.id_field == "uid"
        assert CollectionName.SINKS.id_field == "uid"
        assert CollectionName.SOURCES.id_field == "id"
