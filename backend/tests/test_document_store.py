from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from notekeeper.core.repositories.document_store import Collection
from notekeeper.core.repositories.implementations.memory.document_store import (
    InMemoryDocumentStore,
)
from notekeeper.core.repositories.implementations.supabase.document_store import (
    SupabaseDocumentStore,
)
from notekeeper.errors import StoreFailure


def _supabase_client(data=None, error=None):
    """A Supabase client whose query builder chains back onto itself."""
    query = MagicMock()
    for method in ("select", "insert", "update", "delete", "eq", "in_", "limit"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data)
    client = MagicMock()
    client.table.return_value = query
    return client, query


class TestSupabaseDocumentStore:

    @pytest.mark.asyncio
    async def test_find_one_applies_equality_and_membership_filters(self):
        client, query = _supabase_client(data=[{"id": "a"}])
        store = SupabaseDocumentStore(client)
        owner, ids = uuid4(), [uuid4(), uuid4()]

        row = await store.find_one(Collection.NOTEPADS, {"user": owner, "id": ids})

        assert row == {"id": "a"}
        client.table.assert_called_with("notepads")
        query.eq.assert_called_once_with("user", str(owner))
        query.in_.assert_called_once_with("id", [str(i) for i in ids])
        query.limit.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_empty_membership_filter_skips_round_trip(self):
        client, query = _supabase_client(data=[])
        store = SupabaseDocumentStore(client)

        assert await store.remove("notepads", {"id": []}) == 0
        assert await store.find("notepads", {"id": []}) == []
        query.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_never_sends_primary_key(self):
        client, query = _supabase_client(data=[{"id": "x", "name": "New"}])
        store = SupabaseDocumentStore(client)

        row = await store.update("categories", {"id": "x"}, {"id": "y", "name": "New"})

        assert row["name"] == "New"
        query.update.assert_called_once_with({"name": "New"})

    @pytest.mark.asyncio
    async def test_update_without_match_returns_none(self):
        client, _ = _supabase_client(data=[])
        store = SupabaseDocumentStore(client)

        assert await store.update("categories", {"id": "x"}, {"name": "New"}) is None

    @pytest.mark.asyncio
    async def test_remove_counts_deleted_rows(self):
        client, _ = _supabase_client(data=[{"id": "a"}, {"id": "b"}])
        store = SupabaseDocumentStore(client)

        assert await store.remove("notepads", {"user": "u"}) == 2

    @pytest.mark.asyncio
    async def test_driver_errors_become_store_failures(self):
        client, _ = _supabase_client(error=RuntimeError("connection reset"))
        store = SupabaseDocumentStore(client)

        with pytest.raises(StoreFailure) as excinfo:
            await store.create(Collection.USERS, {"provider_id": "p"})

        assert excinfo.value.collection == "users"
        assert excinfo.value.operation == "create"
        assert isinstance(excinfo.value.__cause__, RuntimeError)


class TestInMemoryDocumentStore:

    @pytest.mark.asyncio
    async def test_records_are_copied(self):
        store = InMemoryDocumentStore()
        created = await store.create("users", {"provider_id": "p", "categories": []})
        created["categories"].append("leak")

        fetched = await store.find_one("users", {"id": created["id"]})

        assert fetched["categories"] == []

    @pytest.mark.asyncio
    async def test_duplicate_id_is_a_store_failure(self):
        store = InMemoryDocumentStore()
        rid = uuid4()
        await store.create("categories", {"id": rid, "name": "a"})

        with pytest.raises(StoreFailure):
            await store.create("categories", {"id": rid, "name": "b"})

    @pytest.mark.asyncio
    async def test_update_and_remove_by_membership(self):
        store = InMemoryDocumentStore()
        a = await store.create("notepads", {"title": "a", "user": "u"})
        b = await store.create("notepads", {"title": "b", "user": "u"})
        await store.create("notepads", {"title": "c", "user": "v"})

        updated = await store.update("notepads", {"id": [a["id"], b["id"]]}, {"title": "z"})
        assert updated["title"] == "z"
        assert {r["title"] for r in await store.find("notepads", {"user": "u"})} == {"z"}

        assert await store.remove("notepads", {"id": [a["id"], b["id"]]}) == 2
        assert [r["title"] for r in await store.find("notepads", {})] == ["c"]
