from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from notekeeper.core.repositories.document_store import (
    DocumentStore,
    collection_name,
    encode_record,
    encode_value,
    is_multi,
)
from notekeeper.errors import StoreFailure
from notekeeper.utils.logging import get_logger

if TYPE_CHECKING:
    from notekeeper.core.repositories.document_store import Filter, Record

logger = get_logger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """Process-local document store.

    Records are kept in their encoded (JSON) form, the same shape PostgREST
    returns, and copied on the way in and out so callers never alias stored
    state. Used for local development and by the test-suite.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Record]] = {}

    def _table(self, collection: str) -> dict[str, Record]:
        return self._collections.setdefault(collection_name(collection), {})

    async def create(self, collection: str, record: Record) -> Record:
        row = encode_record(record)
        row.setdefault("id", str(uuid4()))
        table = self._table(collection)
        if row["id"] in table:
            raise StoreFailure(
                "Duplicate key",
                collection=collection_name(collection),
                operation="create",
                context={"id": row["id"]},
            )
        table[row["id"]] = row
        return copy.deepcopy(row)

    async def find_one(self, collection: str, filter: Filter) -> Record | None:
        for row in self._matching(collection, filter):
            return copy.deepcopy(row)
        return None

    async def find(self, collection: str, filter: Filter) -> list[Record]:
        return [copy.deepcopy(row) for row in self._matching(collection, filter)]

    async def update(self, collection: str, filter: Filter, patch: Record) -> Record | None:
        changes = encode_record(patch)
        changes.pop("id", None)
        updated: list[Record] = []
        for row in self._matching(collection, filter):
            row.update(copy.deepcopy(changes))
            updated.append(row)
        if not updated:
            return None
        return copy.deepcopy(updated[0])

    async def remove(self, collection: str, filter: Filter) -> int:
        table = self._table(collection)
        doomed = [row["id"] for row in self._matching(collection, filter)]
        for key in doomed:
            del table[key]
        return len(doomed)

    def _matching(self, collection: str, filter: Filter) -> list[Record]:
        return [row for row in self._table(collection).values() if self._matches(row, filter)]

    @staticmethod
    def _matches(row: Record, filter: Filter) -> bool:
        for field, expected in filter.items():
            actual: Any = row.get(field)
            wanted = encode_value(expected)
            if is_multi(expected):
                if actual not in wanted:
                    return False
            elif actual != wanted:
                return False
        return True
