from __future__ import annotations

from typing import TYPE_CHECKING, Any

from notekeeper.core.repositories.document_store import (
    DocumentStore,
    collection_name,
    encode_record,
    encode_value,
    is_multi,
)
from notekeeper.errors import StoreFailure
from notekeeper.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    from supabase import Client

    from notekeeper.core.repositories.document_store import Filter, Record


class SupabaseDocumentStore(DocumentStore):
    """Supabase implementation of the DocumentStore.

    Uses Supabase's PostgREST client; each collection is a table whose columns
    match the model fields. ``users.categories`` and ``users.notepads`` are
    ``uuid[]`` columns.
    """

    def __init__(self, client: Client) -> None:
        self._client: Client = client

    async def create(self, collection: str, record: Record) -> Record:
        row = encode_record(record)
        resp = await self._run(
            lambda: self._client.table(collection_name(collection))
            .insert(row)
            .execute(),
            collection=collection,
            operation="create",
        )
        data = self._first(resp.data)
        if not data:
            raise StoreFailure("Insert returned no row", collection=collection_name(collection), operation="create")
        return data

    async def find_one(self, collection: str, filter: Filter) -> Record | None:
        if self._is_empty_selection(filter):
            return None

        def _query():
            q = self._client.table(collection_name(collection)).select("*")
            return self._apply(q, filter).limit(1).execute()

        resp = await self._run(_query, collection=collection, operation="find_one")
        items = resp.data or []
        if not items:
            return None
        return items[0]

    async def find(self, collection: str, filter: Filter) -> list[Record]:
        if self._is_empty_selection(filter):
            return []

        def _query():
            q = self._client.table(collection_name(collection)).select("*")
            return self._apply(q, filter).execute()

        resp = await self._run(_query, collection=collection, operation="find")
        return list(resp.data or [])

    async def update(self, collection: str, filter: Filter, patch: Record) -> Record | None:
        # never rewrite the primary key
        sanitized = {k: v for k, v in encode_record(patch).items() if k != "id"}
        if not sanitized:
            return await self.find_one(collection, filter)
        if self._is_empty_selection(filter):
            return None

        def _query():
            q = self._client.table(collection_name(collection)).update(sanitized)
            return self._apply(q, filter).execute()

        resp = await self._run(_query, collection=collection, operation="update")
        items = resp.data or []
        if not items:
            return None
        return items[0]

    async def remove(self, collection: str, filter: Filter) -> int:
        if self._is_empty_selection(filter):
            return 0

        def _query():
            q = self._client.table(collection_name(collection)).delete()
            return self._apply(q, filter).execute()

        resp = await self._run(_query, collection=collection, operation="remove")
        return len(resp.data or [])

    @staticmethod
    def _apply(query: Any, filter: Filter) -> Any:
        for field, value in filter.items():
            if is_multi(value):
                query = query.in_(field, encode_value(value))
            else:
                query = query.eq(field, encode_value(value))
        return query

    @staticmethod
    def _is_empty_selection(filter: Filter) -> bool:
        # PostgREST rejects `in.()`; an empty membership filter matches nothing anyway
        return any(is_multi(v) and not v for v in filter.values())

    @staticmethod
    async def _run(func: Callable[[], Any], *, collection: str, operation: str) -> Any:
        import asyncio
        name = collection_name(collection)
        try:
            return await asyncio.to_thread(func)
        except Exception as err:
            logger.error(
                "Supabase %s on %s failed: %s",
                operation,
                name,
                err,
                extra={"collection": name, "operation": operation},
            )
            raise StoreFailure(
                f"Supabase {operation} failed",
                collection=name,
                operation=operation,
            ) from err

    @staticmethod
    def _first(data: Any) -> dict[str, Any]:
        if isinstance(data, list) and data:
            return data[0]
        if isinstance(data, dict):
            return data
        return {}
