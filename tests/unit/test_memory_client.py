"""
Unit tests for the in-memory remote collection client.

Tests cover:
- CRUD semantics and id assignment
- Failure injection
- Isolation of returned rows
"""

import pytest

from configstore.errors import RemoteCollectionError
from configstore.memory import InMemoryCollectionClient
from configstore.models import CollectionName
from configstore.remote import RemoteCollectionClient


class TestInMemoryCollectionClient:
    """Tests for InMemoryCollectionClient."""

    @pytest.fixture
    def client(self):
        return InMemoryCollectionClient(CollectionName.SINKS)

    def test_implements_protocol(self, client):
        assert isinstance(client, RemoteCollectionClient)

    @pytest.mark.asyncio
    async def test_add_assigns_id(self, client):
        stored = await client.add({"type": "postgres"})

        assert stored["uid"]
        assert await client.get(stored["uid"]) == stored

    @pytest.mark.asyncio
    async def test_add_keeps_caller_id(self, client):
        stored = await client.add({"uid": "d1", "type": "postgres"})
        assert stored["uid"] == "d1"

    @pytest.mark.asyncio
    async def test_add_duplicate_rejected(self, client):
        client.seed([{"uid": "d1", "type": "postgres"}])

        with pytest.raises(RemoteCollectionError) as exc_info:
            await client.add({"uid": "d1", "type": "postgres"})

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_caller_ids_required(self):
        client = InMemoryCollectionClient(CollectionName.KEYS, caller_ids=True)

        with pytest.raises(RemoteCollectionError) as exc_info:
            await client.add({"serverAuth": "s2s.p.x"})

        assert exc_info.value.status_code == 400
        assert client.snapshot() == {}

    @pytest.mark.asyncio
    async def test_return_nothing_on_add(self, client):
        client.return_nothing_on_add = True

        assert await client.add({"uid": "d1", "type": "postgres"}) is None
        assert "d1" in client.snapshot()

    @pytest.mark.asyncio
    async def test_patch_is_shallow(self, client):
        client.seed([{"uid": "d1", "type": "postgres", "onlyKeys": ["k1"], "sources": ["s1"]}])

        await client.patch("d1", {"onlyKeys": []})

        row = client.snapshot()["d1"]
        assert row["onlyKeys"] == []
        assert row["sources"] == ["s1"]

    @pytest.mark.asyncio
    async def test_patch_unknown_id(self, client):
        with pytest.raises(RemoteCollectionError) as exc_info:
            await client.patch("missing", {"onlyKeys": []})
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_replace_overwrites(self, client):
        client.seed([{"uid": "d1", "type": "postgres", "host": "a"}])

        await client.replace("d1", {"type": "s3"})

        assert client.snapshot()["d1"] == {"uid": "d1", "type": "s3"}

    @pytest.mark.asyncio
    async def test_delete_unknown_is_silent(self, client):
        await client.delete("missing")
        assert client.call_count("delete") == 1

    @pytest.mark.asyncio
    async def test_returned_rows_are_copies(self, client):
        client.seed([{"uid": "d1", "type": "postgres", "onlyKeys": []}])

        rows = await client.get_all()
        rows[0]["onlyKeys"].append("k1")

        assert client.snapshot()["d1"]["onlyKeys"] == []

    @pytest.mark.asyncio
    async def test_fail_next_is_one_shot(self, client):
        client.fail_next("get_all")

        with pytest.raises(RemoteCollectionError):
            await client.get_all()
        assert await client.get_all() == []
        assert client.call_count("get_all") == 2

    @pytest.mark.asyncio
    async def test_fail_next_for_one_id(self, client):
        client.seed([
            {"uid": "d1", "type": "postgres"},
            {"uid": "d2", "type": "postgres"},
        ])
        client.fail_next("patch", entity_id="d2")

        await client.patch("d1", {"host": "x"})
        with pytest.raises(RemoteCollectionError):
            await client.patch("d2", {"host": "x"})

        assert client.snapshot()["d1"]["host"] == "x"
        assert "host" not in client.snapshot()["d2"]

    @pytest.mark.asyncio
    async def test_fail_next_custom_error(self, client):
        client.fail_next("get_all", error=TimeoutError("slow"))

        with pytest.raises(TimeoutError):
            await client.get_all()

    @pytest.mark.asyncio
    async def test_close(self, client):
        await client.close()
        assert client.is_closed
