"""
Unit tests for link reconciliation functions.
"""

from configstore.links import (
    align_mirrored_links,
    extend_links,
    prune_links,
    reconcile_membership,
)
from configstore.models import Sink, Source


def _sinks():
    return [
        Sink(uid="d1", type="postgres", only_keys=["k1"], sources=["s1"]),
        Sink(uid="d2", type="postgres", only_keys=[], sources=[]),
        Sink(uid="d3", type="postgres", only_keys=["k2", "k1"], sources=["s1", "s2"]),
    ]


class TestReconcileMembership:
    def test_adds_and_removes(self):
        patches = reconcile_membership(
            _sinks(), links_field="only_keys", target_id="k1", desired_ids=["d2", "d3"]
        )

        assert patches == {"d1": {"only_keys": []}, "d2": {"only_keys": ["k1"]}}

    def test_nothing_to_do(self):
        patches = reconcile_membership(
            _sinks(), links_field="only_keys", target_id="k1", desired_ids=["d1", "d3"]
        )
        assert patches == {}


class TestPruneLinks:
    def test_prunes_listed_ids(self):
        patches = prune_links(_sinks(), links_field="sources", removed_ids=["s1"])

        assert patches == {"d1": {"sources": []}, "d3": {"sources": ["s2"]}}

    def test_unknown_id(self):
        assert prune_links(_sinks(), links_field="sources", removed_ids=["s9"]) == {}


class TestExtendLinks:
    def test_appends_to_named_only(self):
        patches = extend_links(
            _sinks(), links_field="only_keys", added_ids=["k1", "k3"], only_ids=["d1", "d2"]
        )

        assert patches == {"d1": {"only_keys": ["k1", "k3"]}, "d2": {"only_keys": ["k1", "k3"]}}

    def test_skips_unchanged(self):
        patches = extend_links(
            _sinks(), links_field="only_keys", added_ids=["k1"], only_ids=["d1", "d3"]
        )
        assert patches == {}


class TestAlignMirroredLinks:
    def test_source_declarations_drive_sinks(self):
        updated = [Source(id="s1", destinations=["d2", "d3"])]

        patches = align_mirrored_links(
            updated, _sinks(), declared_field="destinations", mirror_field="sources"
        )

        assert patches == {"d1": {"sources": []}, "d2": {"sources": ["s1"]}}

    def test_changes_accumulate_per_target(self):
        updated = [Source(id="s3", destinations=["d2"]), Source(id="s4", destinations=["d2"])]

        patches = align_mirrored_links(
            updated, _sinks(), declared_field="destinations", mirror_field="sources"
        )

        assert patches == {"d2": {"sources": ["s3", "s4"]}}

    def test_sink_declarations_drive_sources(self):
        sources = [Source(id="s1", destinations=["d1"]), Source(id="s2", destinations=[])]
        updated = [Sink(uid="d1", type="postgres", sources=["s2"])]

        patches = align_mirrored_links(
            updated, sources, declared_field="sources", mirror_field="destinations"
        )

        assert patches == {"s1": {"destinations": []}, "s2": {"destinations": ["d1"]}}
