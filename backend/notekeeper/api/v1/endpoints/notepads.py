from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TCH003

from fastapi import APIRouter, Depends

from notekeeper.api.responses import no_content
from notekeeper.api.v1.schemas.category import CategoryWithNotepadsRead
from notekeeper.api.v1.schemas.notepad import NotepadCreate, NotepadRead, NotepadUpdate
from notekeeper.dependencies import get_current_account, get_orchestrator

if TYPE_CHECKING:
    from notekeeper.core.models.user import User
    from notekeeper.core.services.orchestrator import ConsistencyOrchestrator

router = APIRouter()


@router.get("/", response_model=list[NotepadRead] | list[CategoryWithNotepadsRead])
async def list_notepads(
    insidecats: bool = False,
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    """List the user's notepads.

    With ``?insidecats=1`` the notepads come grouped under their categories,
    categories without notepads included.
    """
    if insidecats:
        categories = await service.list_categories_with_notepads(account.id)
        return [CategoryWithNotepadsRead.model_validate(c) for c in categories]
    notepads = await service.list_notepads(account.id)
    return [NotepadRead.model_validate(n) for n in notepads]


@router.post("/", response_model=NotepadRead)
async def create_notepad(
    payload: NotepadCreate,
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    notepad = await service.create_notepad(account.id, payload.title, payload.text, payload.category)
    if not notepad:
        return no_content()
    return NotepadRead.model_validate(notepad)


@router.get("/{notepad_id}", response_model=NotepadRead)
async def get_notepad(
    notepad_id: UUID,
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    notepad = await service.get_notepad(account.id, notepad_id)
    if not notepad:
        return no_content()
    return NotepadRead.model_validate(notepad)


@router.put("/{notepad_id}", response_model=NotepadRead)
async def update_notepad(
    notepad_id: UUID,
    payload: NotepadUpdate,
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    notepad = await service.update_notepad(
        account.id,
        notepad_id,
        payload.title,
        payload.text,
        payload.category,
    )
    if not notepad:
        return no_content()
    return NotepadRead.model_validate(notepad)


@router.delete("/{notepad_id}", response_model=NotepadRead)
async def delete_notepad(
    notepad_id: UUID,
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    notepad = await service.delete_notepad(account.id, notepad_id)
    if not notepad:
        return no_content()
    return NotepadRead.model_validate(notepad)
