from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import Field, field_validator

from .base import StoredModel

TITLE_MAX_LENGTH = 255
TEXT_MAX_LENGTH = 100000


def normalize_title(value: str | None) -> str:
    """Strip a notepad title; blank and over-long titles raise ``ValueError``."""
    title = (value or "").strip()
    if not title:
        raise ValueError("Notepad title must be non-empty")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValueError("Notepad title is too long")
    return title


class Notepad(StoredModel):
    """Leaf entity: a titled piece of text filed under one category."""

    id: UUID = Field(default_factory=uuid4)
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    text: str = Field(..., max_length=TEXT_MAX_LENGTH)
    category: UUID
    user: UUID

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return normalize_title(v)
