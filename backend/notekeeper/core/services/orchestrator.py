from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Any

from notekeeper.core.ledgers.scoped import parse_id
from notekeeper.core.models.category import CategoryWithNotepads
from notekeeper.core.schemas.reconciliation import CounterFix, ReconciliationReport
from notekeeper.errors import StoreFailure, ValidationFailure
from notekeeper.utils.logging import get_logger

if TYPE_CHECKING:
    from uuid import UUID

    from notekeeper.core.ledgers.category import CategoryLedger
    from notekeeper.core.ledgers.notepad import NotepadLedger
    from notekeeper.core.ledgers.user import UserLedger
    from notekeeper.core.models.category import Category
    from notekeeper.core.models.notepad import Notepad

logger = get_logger(__name__)


def _require_text(**fields: Any) -> dict[str, str]:
    """Reject missing or blank required strings before touching the store."""
    missing = [name for name, value in fields.items() if not isinstance(value, str) or not value.strip()]
    if missing:
        raise ValidationFailure(f"Missing required field(s): {', '.join(missing)}", context={"fields": missing})
    return fields


def _require_id(name: str, value: Any) -> UUID:
    uid = parse_id(value)
    if uid is None:
        raise ValidationFailure(f"Missing or malformed {name}", context={name: str(value)})
    return uid


def _log_residual(flow: str, step: str, err: StoreFailure, **ids: Any) -> None:
    logger.error(
        "Residual inconsistency: %s failed at '%s' after earlier writes succeeded: %s",
        flow,
        step,
        err,
        extra={k: str(v) for k, v in ids.items()},
    )


class ConsistencyOrchestrator:
    """Sequences writes across the user, category and notepad ledgers.

    Every flow is a chain of awaited, non-atomic store calls issued in a fixed
    order. ``None`` means "not found or not yours" (soft 404) and is returned
    before any write happens. ``StoreFailure`` propagates; when it interrupts a
    flow after an earlier write, the partial state is logged and left as is.
    """

    def __init__(
        self,
        users: UserLedger,
        categories: CategoryLedger,
        notepads: NotepadLedger,
    ) -> None:
        self._users = users
        self._categories = categories
        self._notepads = notepads

    # categories

    async def list_categories(self, user_id: Any) -> list[Category]:
        return await self._categories.get_by_user_id(user_id)

    async def get_category(self, user_id: Any, category_id: Any) -> Category | None:
        return await self._categories.get_by_id_for_user(category_id, user_id)

    async def create_category(self, user_id: Any, name: str) -> Category:
        _require_text(name=name)
        owner = _require_id("user id", user_id)

        category = await self._categories.create(name, owner)
        try:
            user = await self._users.add_category(owner, category.id)
        except StoreFailure as err:
            _log_residual("create_category", "add category to user", err, user=owner, category=category.id)
            raise
        if user is None:
            logger.warning("User %s vanished while adding category %s", owner, category.id)
        return category

    async def update_category(self, user_id: Any, category_id: Any, name: str) -> Category | None:
        _require_text(name=name)
        return await self._categories.update(category_id, user_id, name)

    async def delete_category(self, user_id: Any, category_id: Any) -> Category | None:
        """Delete a category and cascade to its notepads.

        Returns the category as it was before deletion.
        """
        category = await self._categories.get_by_id_for_user(category_id, user_id)
        if category is None:
            logger.info("Category %s not found for user %s", category_id, user_id)
            return None

        removed = await self._categories.remove(category.id)
        if not removed:
            logger.info("Category %s already gone", category.id)
            return None

        owner = category.user
        try:
            user = await self._users.remove_category(owner, category.id)
            if user is None:
                logger.warning("User %s with category %s not found", owner, category.id)
                return None

            notepads = await self._notepads.find_by_user_and_category(owner, category.id)
            if notepads:
                ids = [n.id for n in notepads]
                await self._notepads.remove_many(ids)
                await self._users.remove_notepads(owner, ids)
        except StoreFailure as err:
            _log_residual("delete_category", err.operation or "cascade", err, user=owner, category=category.id)
            raise

        return category

    # notepads

    async def list_notepads(self, user_id: Any) -> list[Notepad]:
        return await self._notepads.get_by_user_id(user_id)

    async def get_notepad(self, user_id: Any, notepad_id: Any) -> Notepad | None:
        return await self._notepads.get_by_id_for_user(notepad_id, user_id)

    async def list_categories_with_notepads(self, user_id: Any) -> list[CategoryWithNotepads]:
        """Every category of the user with its notepads nested, empty ones included."""
        categories = await self._categories.get_by_user_id(user_id)
        if not categories:
            return []
        notepads = await self._notepads.get_by_user_id(user_id)

        grouped: dict[UUID, list[Notepad]] = {c.id: [] for c in categories}
        for notepad in notepads:
            if notepad.category in grouped:
                grouped[notepad.category].append(notepad)
        return [
            CategoryWithNotepads(**c.model_dump(), notepads=grouped[c.id])
            for c in categories
        ]

    async def create_notepad(self, user_id: Any, title: str, text: str, category_id: Any) -> Notepad | None:
        """Create a notepad, bump its category's counter and register it on the user."""
        _require_text(title=title)
        if text is None:
            raise ValidationFailure("Missing required field(s): text", context={"fields": ["text"]})
        _require_id("category id", category_id)
        owner = _require_id("user id", user_id)

        category = await self._categories.get_by_id_for_user(category_id, owner)
        if category is None:
            logger.info("Category %s not found for user %s", category_id, owner)
            return None

        notepad = await self._notepads.create(title, text, category.id, owner)

        try:
            if await self._categories.increase_count(category.id) is None:
                logger.warning("Category %s vanished before its counter was increased", category.id)
            if await self._users.add_notepad(owner, notepad.id) is None:
                logger.warning("User %s vanished before notepad %s was registered", owner, notepad.id)
        except StoreFailure as err:
            _log_residual("create_notepad", err.operation or "counters", err, user=owner, notepad=notepad.id)
            raise

        return notepad

    async def update_notepad(
        self,
        user_id: Any,
        notepad_id: Any,
        title: str,
        text: str,
        category_id: Any,
    ) -> Notepad | None:
        """Rewrite a notepad; moving it re-balances both category counters.

        The old category is decremented before the new one is incremented,
        both after the notepad row itself has been updated.
        """
        _require_id("notepad id", notepad_id)
        _require_text(title=title)
        if text is None:
            raise ValidationFailure("Missing required field(s): text", context={"fields": ["text"]})
        _require_id("category id", category_id)

        existing = await self._notepads.get_by_id_for_user(notepad_id, user_id)
        if existing is None:
            logger.info("Notepad %s not found for user %s", notepad_id, user_id)
            return None

        updated = await self._notepads.update(
            existing.id,
            existing.user,
            {"title": title, "text": text, "category": category_id},
        )
        if updated is None:
            logger.info("Notepad %s update rejected: category %s not accessible", existing.id, category_id)
            return None

        if updated.category != existing.category:
            try:
                await self._categories.decrease_count(existing.category)
                await self._categories.increase_count(updated.category)
            except StoreFailure as err:
                _log_residual(
                    "update_notepad",
                    "move counters",
                    err,
                    notepad=existing.id,
                    old_category=existing.category,
                    new_category=updated.category,
                )
                raise

        return updated

    async def delete_notepad(self, user_id: Any, notepad_id: Any) -> Notepad | None:
        """Delete a notepad and return its snapshot from before the deletion."""
        notepad = await self._notepads.get_by_id_for_user(notepad_id, user_id)
        if notepad is None:
            logger.info("Notepad %s not found for user %s", notepad_id, user_id)
            return None

        removed = await self._notepads.remove(notepad.id)
        if not removed:
            logger.info("Notepad %s already gone", notepad.id)
            return None

        try:
            await self._categories.decrease_count(notepad.category)
            await self._users.remove_notepad(notepad.user, notepad.id)
        except StoreFailure as err:
            _log_residual("delete_notepad", err.operation or "counters", err, user=notepad.user, notepad=notepad.id)
            raise

        return notepad

    # repair

    async def reconcile_user(self, user_id: Any) -> ReconciliationReport | None:
        """Rebuild counters and the user's id sets from the category/notepad records.

        Orphaned notepads (filed under a category that no longer exists) are
        reported, not deleted.
        """
        user = await self._users.find_by_id(user_id)
        if user is None:
            return None

        categories = await self._categories.get_by_user_id(user.id)
        notepads = await self._notepads.get_by_user_id(user.id)
        report = ReconciliationReport(user=user.id)

        counts = Counter(n.category for n in notepads)
        for category in categories:
            actual = counts.get(category.id, 0)
            if category.notepads_count != actual:
                await self._categories.set_count(category.id, actual)
                report.counters.append(CounterFix(category=category.id, was=category.notepads_count, now=actual))

        known = {c.id for c in categories}
        report.orphan_notepads = [n.id for n in notepads if n.category not in known]

        category_ids = [c.id for c in categories]
        notepad_ids = [n.id for n in notepads]
        if set(user.categories) != set(category_ids) or set(user.notepads) != set(notepad_ids):
            await self._users.restore_sets(user.id, category_ids, notepad_ids)
            report.user_sets_rewritten = True

        if report.counters or report.user_sets_rewritten or report.orphan_notepads:
            logger.warning(
                "Reconciled user %s: %d counter(s), sets rewritten=%s, %d orphan(s)",
                user.id,
                len(report.counters),
                report.user_sets_rewritten,
                len(report.orphan_notepads),
            )
        return report
