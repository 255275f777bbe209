from __future__ import annotations

from notekeeper.core.models.base import AppBaseModel
from notekeeper.core.models.category import Category  # noqa: TCH001
from notekeeper.core.models.notepad import Notepad  # noqa: TCH001
from notekeeper.core.models.user import User  # noqa: TCH001


class Prepopulated(AppBaseModel):
    """Records produced by onboarding a fresh account."""

    user: User
    category: Category
    notepad: Notepad
