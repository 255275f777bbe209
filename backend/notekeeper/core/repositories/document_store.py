from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from typing import Any
from uuid import UUID

Record = dict[str, Any]
Filter = Mapping[str, Any]


class Collection(str, Enum):
    """Collections (tables) managed by the service."""

    USERS = "users"
    CATEGORIES = "categories"
    NOTEPADS = "notepads"


def encode_value(value: Any) -> Any:
    """Convert a Python value into its JSON/PostgREST representation."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [encode_value(v) for v in value]
    return value


def collection_name(collection: str) -> str:
    if isinstance(collection, Enum):
        return collection.value
    return collection


def encode_record(record: Mapping[str, Any]) -> Record:
    return {k: encode_value(v) for k, v in record.items()}


def is_multi(value: Any) -> bool:
    """Whether a filter value means "field in values" rather than equality."""
    return isinstance(value, (list, tuple, set, frozenset))


class DocumentStore(ABC):
    """Abstract single-collection document store.

    Every call is one bounded round-trip against one collection. There are no
    transactions and no foreign keys: keeping collections consistent with each
    other is the caller's job. Implementations raise ``StoreFailure`` when the
    underlying driver errors.

    Filters are equality maps; a list/tuple/set value matches any of its
    members.
    """

    @abstractmethod
    async def create(self, collection: str, record: Record) -> Record:  # pragma: no cover - interface only
        """Insert a record and return it as stored."""

    @abstractmethod
    async def find_one(self, collection: str, filter: Filter) -> Record | None:  # pragma: no cover
        """Return the first record matching ``filter`` or None."""

    @abstractmethod
    async def find(self, collection: str, filter: Filter) -> list[Record]:  # pragma: no cover
        """Return every record matching ``filter``."""

    @abstractmethod
    async def update(self, collection: str, filter: Filter, patch: Record) -> Record | None:  # pragma: no cover
        """Apply ``patch`` to matching records; return the first updated record or None."""

    @abstractmethod
    async def remove(self, collection: str, filter: Filter) -> int:  # pragma: no cover
        """Delete matching records and return how many were removed."""
