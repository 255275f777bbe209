from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar
from uuid import UUID

from pydantic import ValidationError

from notekeeper.core.models.base import StoredModel
from notekeeper.errors import ValidationFailure

if TYPE_CHECKING:
    from notekeeper.core.repositories.document_store import DocumentStore, Record

ModelT = TypeVar("ModelT", bound=StoredModel)


def parse_id(value: Any) -> UUID | None:
    """Coerce an id coming from the outside world; None when it is malformed."""
    if value is None:
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return None


def parse_ids(values: Iterable[Any]) -> list[UUID]:
    parsed: list[UUID] = []
    for v in values:
        uid = parse_id(v)
        if uid is not None and uid not in parsed:
            parsed.append(uid)
    return parsed


class ScopedRepository(Generic[ModelT]):
    """Owner-scoped access to one collection.

    Subclasses set ``collection``, ``model`` and ``owner_field``. Any lookup
    "for user" filters on the owner field as well as the id, so a record owned
    by somebody else reads exactly like a missing one.
    """

    collection: ClassVar[str]
    model: ClassVar[type[StoredModel]]
    owner_field: ClassVar[str] = "user"

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def get_by_id(self, record_id: Any) -> ModelT | None:
        key = parse_id(record_id)
        if key is None:
            return None
        row = await self._store.find_one(self.collection, {"id": key})
        return self._load(row)

    async def get_by_id_for_user(self, record_id: Any, owner_id: Any) -> ModelT | None:
        key, owner = parse_id(record_id), parse_id(owner_id)
        if key is None or owner is None:
            return None
        row = await self._store.find_one(self.collection, {"id": key, self.owner_field: owner})
        return self._load(row)

    async def list_for_user(self, owner_id: Any) -> list[ModelT]:
        owner = parse_id(owner_id)
        if owner is None:
            return []
        rows = await self._store.find(self.collection, {self.owner_field: owner})
        return [self._load(r) for r in rows]

    async def remove(self, record_id: Any) -> int:
        key = parse_id(record_id)
        if key is None:
            return 0
        return await self._store.remove(self.collection, {"id": key})

    async def remove_many(self, record_ids: Iterable[Any]) -> int:
        keys = parse_ids(record_ids)
        if not keys:
            return 0
        return await self._store.remove(self.collection, {"id": keys})

    async def _insert(self, entity: ModelT) -> ModelT:
        row = await self._store.create(self.collection, entity.to_record())
        return self._load(row)

    async def _update_scoped(self, record_id: UUID, owner_id: UUID, patch: Record) -> ModelT | None:
        row = await self._store.update(
            self.collection,
            {"id": record_id, self.owner_field: owner_id},
            patch,
        )
        return self._load(row)

    def _build(self, **fields: Any) -> ModelT:
        try:
            return self.model(**fields)
        except ValidationError as err:
            raise ValidationFailure(
                f"Invalid {self.model.__name__}",
                context={"errors": err.errors(include_url=False)},
            ) from err

    def _load(self, row: Record | None) -> ModelT | None:
        if row is None:
            return None
        return self.model.model_validate(row)
