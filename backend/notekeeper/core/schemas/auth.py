from __future__ import annotations

from notekeeper.core.models.base import AppBaseModel


class AuthUser(AppBaseModel):
    """Authenticated identity extracted from a Supabase JWT."""

    id: str
    email: str = ""
    name: str = ""
    photo: str | None = None
    role: str | None = None
