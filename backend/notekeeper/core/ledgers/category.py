from __future__ import annotations

from typing import Any

from notekeeper.core.ledgers.scoped import ScopedRepository, parse_id
from notekeeper.core.models.category import Category
from notekeeper.core.repositories.document_store import Collection
from notekeeper.errors import ValidationFailure


class CategoryLedger(ScopedRepository[Category]):
    """Category records and their denormalized ``notepads_count``.

    Never touches users or notepads; the orchestrator does that.
    """

    collection = Collection.CATEGORIES.value
    model = Category

    async def create(self, name: str, owner_id: Any) -> Category:
        owner = parse_id(owner_id)
        if owner is None:
            raise ValidationFailure("Invalid owner id", context={"owner_id": str(owner_id)})
        category = self._build(name=name or "", user=owner)
        return await self._insert(category)

    async def get_by_user_id(self, owner_id: Any) -> list[Category]:
        return await self.list_for_user(owner_id)

    async def update(self, category_id: Any, owner_id: Any, new_name: str) -> Category | None:
        """Rename a category; None when it does not exist for this owner."""
        key, owner = parse_id(category_id), parse_id(owner_id)
        if key is None or owner is None:
            return None
        name = (new_name or "").strip()
        if not name:
            raise ValidationFailure("Category name must be non-empty")
        if len(name) > 255:
            raise ValidationFailure("Category name is too long")
        return await self._update_scoped(key, owner, {"name": name})

    async def increase_count(self, category_id: Any, delta: int = 1) -> Category | None:
        """Shift the counter by ``delta``. Not clamped: it may go below zero."""
        category = await self.get_by_id(category_id)
        if category is None:
            return None
        row = await self._store.update(
            self.collection,
            {"id": category.id},
            {"notepads_count": category.notepads_count + delta},
        )
        return self._load(row)

    async def decrease_count(self, category_id: Any, delta: int = 1) -> Category | None:
        return await self.increase_count(category_id, -delta)

    async def set_count(self, category_id: Any, count: int) -> Category | None:
        key = parse_id(category_id)
        if key is None:
            return None
        row = await self._store.update(self.collection, {"id": key}, {"notepads_count": count})
        return self._load(row)
