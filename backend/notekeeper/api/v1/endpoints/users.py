from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends

from notekeeper.api.responses import no_content
from notekeeper.api.v1.schemas.user import UserRead
from notekeeper.core.schemas.reconciliation import ReconciliationReport
from notekeeper.dependencies import get_current_account, get_orchestrator

if TYPE_CHECKING:
    from notekeeper.core.models.user import User
    from notekeeper.core.services.orchestrator import ConsistencyOrchestrator

router = APIRouter()


@router.get("/me", response_model=UserRead)
async def get_me(account: User = Depends(get_current_account)):
    """Return the caller's account, creating and prepopulating it on first call."""
    return UserRead.model_validate(account)


@router.post("/me/reconcile", response_model=ReconciliationReport)
async def reconcile_me(
    account: User = Depends(get_current_account),
    service: ConsistencyOrchestrator = Depends(get_orchestrator),
):
    """Rebuild the caller's counters and id sets from the stored records."""
    report = await service.reconcile_user(account.id)
    if not report:
        return no_content()
    return report
