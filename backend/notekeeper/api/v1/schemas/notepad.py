from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from pydantic import Field

from notekeeper.core.models.base import AppBaseModel


class NotepadCreate(AppBaseModel):
    title: str | None = Field(default=None, description="Notepad title")
    text: str | None = Field(default=None, description="Notepad body")
    category: UUID | None = Field(default=None, description="Category the notepad is filed under")


class NotepadUpdate(AppBaseModel):
    title: str | None = None
    text: str | None = None
    category: UUID | None = None


class NotepadRead(AppBaseModel):
    model_config = {"extra": "ignore"}

    id: UUID
    title: str
    text: str
    category: UUID
    user: UUID
