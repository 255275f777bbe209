from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from pydantic import Field

from notekeeper.api.v1.schemas.notepad import NotepadRead  # noqa: TCH001
from notekeeper.core.models.base import AppBaseModel


class CategoryCreate(AppBaseModel):
    # presence and length are checked below the API so that bad input is a 400, not a 422
    name: str | None = Field(default=None, description="Category name")


class CategoryUpdate(AppBaseModel):
    name: str | None = Field(default=None, description="New category name")


class CategoryRead(AppBaseModel):
    model_config = {"extra": "ignore"}

    id: UUID
    name: str
    user: UUID
    notepads_count: int


class CategoryWithNotepadsRead(CategoryRead):
    notepads: list[NotepadRead]
