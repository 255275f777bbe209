from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from notekeeper.core.models.base import AppBaseModel


class UserRead(AppBaseModel):
    model_config = {"extra": "ignore"}

    id: UUID
    name: str
    photo: str | None
    categories: list[UUID]
    notepads: list[UUID]
