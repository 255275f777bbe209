from __future__ import annotations

from typing import TYPE_CHECKING, Any

from notekeeper.core.ledgers.scoped import ScopedRepository, parse_id
from notekeeper.core.models.notepad import TEXT_MAX_LENGTH, Notepad, normalize_title
from notekeeper.core.repositories.document_store import Collection
from notekeeper.errors import ValidationFailure

if TYPE_CHECKING:
    from notekeeper.core.ledgers.category import CategoryLedger
    from notekeeper.core.repositories.document_store import DocumentStore

UPDATABLE_FIELDS = ("title", "text", "category")


class NotepadLedger(ScopedRepository[Notepad]):
    """Notepad records. Leaf of the model: no counters of its own."""

    collection = Collection.NOTEPADS.value
    model = Notepad

    def __init__(self, store: DocumentStore, categories: CategoryLedger) -> None:
        super().__init__(store)
        self._categories = categories

    async def create(self, title: str, text: str, category_id: Any, owner_id: Any) -> Notepad:
        category, owner = parse_id(category_id), parse_id(owner_id)
        if category is None or owner is None:
            raise ValidationFailure(
                "Invalid category or owner id",
                context={"category_id": str(category_id), "owner_id": str(owner_id)},
            )
        notepad = self._build(title=title, text=text, category=category, user=owner)
        return await self._insert(notepad)

    async def get_by_user_id(self, owner_id: Any) -> list[Notepad]:
        return await self.list_for_user(owner_id)

    async def find_by_user_and_category(self, owner_id: Any, category_id: Any) -> list[Notepad]:
        owner, category = parse_id(owner_id), parse_id(category_id)
        if owner is None or category is None:
            return []
        rows = await self._store.find(self.collection, {"user": owner, "category": category})
        return [self._load(r) for r in rows]

    async def update(self, notepad_id: Any, owner_id: Any, fields: dict[str, Any]) -> Notepad | None:
        """Apply ``title``/``text``/``category`` changes.

        A target category that the owner cannot see rejects the whole update:
        nothing is written and None comes back, exactly as for a missing
        notepad.
        """
        key, owner = parse_id(notepad_id), parse_id(owner_id)
        if key is None or owner is None:
            return None

        changes = {k: v for k, v in (fields or {}).items() if k in UPDATABLE_FIELDS}
        if "title" in changes:
            try:
                changes["title"] = normalize_title(changes["title"])
            except ValueError as err:
                raise ValidationFailure(str(err), context={"notepad_id": str(key)}) from err
        if "text" in changes:
            if changes["text"] is None:
                raise ValidationFailure("Notepad text is required")
            if len(changes["text"]) > TEXT_MAX_LENGTH:
                raise ValidationFailure("Notepad text is too long")
        if "category" in changes:
            category = await self._categories.get_by_id_for_user(changes["category"], owner)
            if category is None:
                return None
            changes["category"] = category.id

        if not changes:
            return await self.get_by_id_for_user(key, owner)
        return await self._update_scoped(key, owner, changes)
