from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any

from notekeeper.config import settings
from notekeeper.core.ledgers.scoped import parse_id
from notekeeper.core.schemas.onboarding import Prepopulated
from notekeeper.core.services.compensation import CompensationStack
from notekeeper.errors import NotekeeperError, NotFound, ValidationFailure
from notekeeper.utils.logging import get_logger

if TYPE_CHECKING:
    from notekeeper.core.ledgers.category import CategoryLedger
    from notekeeper.core.ledgers.notepad import NotepadLedger
    from notekeeper.core.ledgers.user import UserLedger
    from notekeeper.core.models.user import User

logger = get_logger(__name__)


class OnboardingService:
    """Account creation and the sample content every new account starts with."""

    def __init__(
        self,
        users: UserLedger,
        categories: CategoryLedger,
        notepads: NotepadLedger,
        *,
        category_name: str | None = None,
        notepad_title: str | None = None,
        notepad_text: str | None = None,
    ) -> None:
        self._users = users
        self._categories = categories
        self._notepads = notepads
        self.category_name = category_name or settings.default_category_name
        self.notepad_title = notepad_title or settings.welcome_notepad_title
        self.notepad_text = notepad_text if notepad_text is not None else settings.welcome_notepad_text

    async def prepopulate(self, user_id: Any) -> Prepopulated:
        """Give a user a sample category holding a welcome notepad.

        Runs the same create sequence as the CRUD paths. If any step fails,
        the notepad and category created so far are removed and the user's id
        sets are overwritten with their values from before the call. Each undo
        step is attempted once; its own failure is only logged. The original
        error is re-raised.
        """
        if not user_id or parse_id(user_id) is None:
            raise ValidationFailure("Invalid user id!", context={"user_id": str(user_id)})

        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found!", context={"user_id": str(user_id)})

        categories_before = list(user.categories)
        notepads_before = list(user.notepads)

        async with CompensationStack("prepopulate", user_id=user.id) as undo:
            undo.push(
                "restore user sets",
                partial(self._users.restore_sets, user.id, categories_before, notepads_before),
            )

            category = await self._categories.create(self.category_name, user.id)
            undo.push("remove category", partial(self._categories.remove, category.id))

            user = await self._users.add_category(user.id, category.id)
            if user is None:
                raise NotFound("User not found!", context={"user_id": str(user_id)})

            notepad = await self._notepads.create(self.notepad_title, self.notepad_text, category.id, user.id)
            undo.push("remove notepad", partial(self._notepads.remove, notepad.id))

            category = await self._categories.increase_count(category.id)
            if category is None:
                raise NotFound("Category not found!", context={"user_id": str(user_id)})

            user = await self._users.add_notepad(user.id, notepad.id)
            if user is None:
                raise NotFound("User not found!", context={"user_id": str(user_id)})

        logger.info("Prepopulated user %s", user.id, extra={"category": str(category.id), "notepad": str(notepad.id)})
        return Prepopulated(user=user, category=category, notepad=notepad)

    async def onboard(self, provider_id: str, name: str = "", photo: str | None = None) -> User:
        """Return the account for an identity-provider id, creating it on first sight.

        A fresh account is prepopulated. When that fails the account is still
        returned, empty, and the failure is logged.
        """
        user = await self._users.find_by_provider_id(provider_id)
        if user is not None:
            return user

        user = await self._users.create(provider_id, name=name, photo=photo)
        logger.info("Created user %s for provider id %s", user.id, provider_id)
        try:
            result = await self.prepopulate(user.id)
        except NotekeeperError as err:
            logger.error("Prepopulation failed for user %s: %s", user.id, err.message)
            return user
        return result.user
