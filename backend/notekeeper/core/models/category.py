from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import Field, field_validator

from .base import StoredModel
from .notepad import Notepad


class Category(StoredModel):
    """Category owned by a user.

    ``notepads_count`` mirrors the number of the owner's notepads filed under
    this category. It is maintained by the orchestrator, not by the store, and
    may drift after a partial failure.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=255)
    user: UUID
    notepads_count: int = 0

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Category name must be non-empty")
        return stripped


class CategoryWithNotepads(Category):
    notepads: list[Notepad] = Field(default_factory=list)
