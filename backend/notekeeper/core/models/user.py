from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import Field, field_validator

from .base import StoredModel


def _unique(ids: list[UUID]) -> list[UUID]:
    seen: list[UUID] = []
    for i in ids:
        if i not in seen:
            seen.append(i)
    return seen


class User(StoredModel):
    """Account record with denormalized id sets of everything the user owns."""

    id: UUID = Field(default_factory=uuid4)
    provider_id: str = Field(..., min_length=1, description="Identity provider user id")
    name: str = Field(default="", max_length=255)
    photo: str | None = None

    # set semantics, order irrelevant
    categories: list[UUID] = Field(default_factory=list)
    notepads: list[UUID] = Field(default_factory=list)

    @field_validator("categories", "notepads", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v

    @field_validator("categories", "notepads")
    @classmethod
    def dedupe(cls, v: list[UUID]) -> list[UUID]:
        return _unique(v)
