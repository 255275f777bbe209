from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TCH003

from fastapi import APIRouter, Depends

from notekeeper.api.responses import no_content
from notekeeper.api.v1.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from notekeeper.dependencies import get_current_account, get_orchestrator

if TYPE_CHECKING:
    from notekeeper.core.models.user import User
    from notekeeper.core.services.orchestrator import ConsistencyOrchestrator

router = APIRouter()


@router.get("/", response_model=list[CategoryRead])
async def list_categories(
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    categories = await service.list_categories(account.id)
    return [CategoryRead.model_validate(c) for c in categories]


@router.post("/", response_model=CategoryRead)
async def create_category(
    payload: CategoryCreate,
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    category = await service.create_category(account.id, payload.name)
    return CategoryRead.model_validate(category)


@router.get("/{category_id}", response_model=CategoryRead)
async def get_category(
    category_id: UUID,
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    category = await service.get_category(account.id, category_id)
    if not category:
        return no_content()
    return CategoryRead.model_validate(category)


@router.put("/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: UUID,
    payload: CategoryUpdate,
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    category = await service.update_category(account.id, category_id, payload.name)
    if not category:
        return no_content()
    return CategoryRead.model_validate(category)


@router.delete("/{category_id}", response_model=CategoryRead)
async def delete_category(
    category_id: UUID,
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    """Delete a category together with every notepad filed under it."""
    category = await service.delete_category(account.id, category_id)
    if not category:
        return no_content()
    return CategoryRead.model_validate(category)
