from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any
from uuid import UUID

from notekeeper.core.ledgers.scoped import ScopedRepository, parse_id, parse_ids
from notekeeper.core.models.user import User
from notekeeper.core.repositories.document_store import Collection
from notekeeper.errors import ValidationFailure


class UserLedger(ScopedRepository[User]):
    """User records and their denormalized ``categories``/``notepads`` id sets.

    Each mutator is a read followed by a single write of the changed array
    (last write wins under concurrency). Mutators return the updated user, or
    None when the user no longer exists.
    """

    collection = Collection.USERS.value
    model = User
    owner_field = "id"

    async def find_by_id(self, user_id: Any) -> User | None:
        return await self.get_by_id(user_id)

    async def find_by_provider_id(self, provider_id: str) -> User | None:
        if not provider_id:
            return None
        row = await self._store.find_one(self.collection, {"provider_id": str(provider_id)})
        return self._load(row)

    async def create(self, provider_id: str, name: str = "", photo: str | None = None) -> User:
        if not provider_id:
            raise ValidationFailure("Identity provider id is required")
        user = self._build(provider_id=str(provider_id), name=name or "", photo=photo)
        return await self._insert(user)

    async def add_category(self, user_id: Any, category_id: Any) -> User | None:
        return await self._mutate(user_id, "categories", lambda ids: _with(ids, [category_id]))

    async def remove_category(self, user_id: Any, category_id: Any) -> User | None:
        return await self._mutate(user_id, "categories", lambda ids: _without(ids, [category_id]))

    async def add_notepad(self, user_id: Any, notepad_id: Any) -> User | None:
        return await self._mutate(user_id, "notepads", lambda ids: _with(ids, [notepad_id]))

    async def remove_notepad(self, user_id: Any, notepad_id: Any) -> User | None:
        return await self._mutate(user_id, "notepads", lambda ids: _without(ids, [notepad_id]))

    async def remove_notepads(self, user_id: Any, notepad_ids: Iterable[Any]) -> User | None:
        doomed = list(notepad_ids)
        return await self._mutate(user_id, "notepads", lambda ids: _without(ids, doomed))

    async def restore_sets(
        self,
        user_id: Any,
        categories: Iterable[Any],
        notepads: Iterable[Any],
    ) -> User | None:
        """Overwrite both id sets without reading first."""
        key = parse_id(user_id)
        if key is None:
            return None
        row = await self._store.update(
            self.collection,
            {"id": key},
            {"categories": parse_ids(categories), "notepads": parse_ids(notepads)},
        )
        return self._load(row)

    async def _mutate(
        self,
        user_id: Any,
        field: str,
        change: Callable[[list[UUID]], list[UUID]],
    ) -> User | None:
        user = await self.find_by_id(user_id)
        if user is None:
            return None
        current: list[UUID] = getattr(user, field)
        updated = change(current)
        if updated == current:
            return user
        row = await self._store.update(self.collection, {"id": user.id}, {field: updated})
        return self._load(row)


def _with(ids: list[UUID], extra: Iterable[Any]) -> list[UUID]:
    result = list(ids)
    for uid in parse_ids(extra):
        if uid not in result:
            result.append(uid)
    return result


def _without(ids: list[UUID], doomed: Iterable[Any]) -> list[UUID]:
    gone = set(parse_ids(doomed))
    return [i for i in ids if i not in gone]
