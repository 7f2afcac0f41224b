"""
Shared fixtures for configuration store tests.
"""

from typing import Any, Dict, List, Optional

import pytest

from configstore import StaticReferenceCatalog, Workspace

HIDDEN_SINK_TYPE = "internal_replay"


@pytest.fixture
def catalog():
    """Catalog hiding one sink type."""
    return StaticReferenceCatalog(
        {
            HIDDEN_SINK_TYPE: {"hidden": True},
            "postgres": {"hidden": False},
        }
    )


@pytest.fixture
def workspace(catalog):
    """Workspace on in-memory clients."""
    return Workspace.in_memory(project_id="proj1", catalog=catalog)


@pytest.fixture
def seed(workspace):
    """Seed remote rows (wire form) into the workspace's in-memory clients.

    Call ``await workspace.pull_all()`` afterwards to load them.
    """

    def _seed(
        keys: Optional[List[Dict[str, Any]]] = None,
        sinks: Optional[List[Dict[str, Any]]] = None,
        sources: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        workspace.keys.client.seed(keys or [])
        workspace.sinks.client.seed(sinks or [])
        workspace.sources.client.seed(sources or [])

    return _seed


def assert_links_agree(workspace) -> None:
    """Source.destinations and Sink.sources describe the same edges."""
    from_sources = {
        (source.id, uid)
        for source in workspace.sources.list_include_hidden
        for uid in source.destinations
    }
    from_sinks = {
        (source_id, sink.uid)
        for sink in workspace.sinks.list_include_hidden
        for source_id in sink.sources
    }
    assert from_sources == from_sinks


@pytest.fixture
def links_agree():
    """Assertion helper for Source <-> Sink agreement."""
    return assert_links_agree
