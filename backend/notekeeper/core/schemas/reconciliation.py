from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from pydantic import Field

from notekeeper.core.models.base import AppBaseModel


class CounterFix(AppBaseModel):
    category: UUID
    was: int
    now: int


class ReconciliationReport(AppBaseModel):
    """Outcome of rebuilding a user's denormalized data from the source records.

    - counters: categories whose ``notepads_count`` was rewritten
    - user_sets_rewritten: whether the user's id sets had drifted
    - orphan_notepads: notepads filed under a category that no longer exists
    """

    user: UUID
    counters: list[CounterFix] = Field(default_factory=list)
    user_sets_rewritten: bool = False
    orphan_notepads: list[UUID] = Field(default_factory=list)
