from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notekeeper.config import settings
from notekeeper.core.ledgers.category import CategoryLedger
from notekeeper.core.ledgers.notepad import NotepadLedger
from notekeeper.core.ledgers.user import UserLedger
from notekeeper.core.repositories.implementations.memory.document_store import (
    InMemoryDocumentStore,
)
from notekeeper.core.repositories.implementations.supabase.document_store import (
    SupabaseDocumentStore,
)
from notekeeper.core.schemas.auth import AuthUser
from notekeeper.core.services.onboarding import OnboardingService
from notekeeper.core.services.orchestrator import ConsistencyOrchestrator
from notekeeper.db.base import create_request_supabase_client
from notekeeper.utils.logging import get_logger

logger = get_logger(__name__)

# Use auto_error=False to handle missing tokens gracefully
http_bearer = HTTPBearer(auto_error=False)

if TYPE_CHECKING:
    from supabase import Client

    from notekeeper.core.models.user import User
    from notekeeper.core.repositories.document_store import DocumentStore


async def _run_blocking(func):
    """Run blocking functions in a thread pool."""
    import asyncio
    return await asyncio.to_thread(func)


@lru_cache(maxsize=1)
def get_memory_store() -> InMemoryDocumentStore:
    """Process-wide in-memory store used when ``store_backend`` is ``memory``."""
    logger.warning("Using the in-memory document store; data is lost on restart")
    return InMemoryDocumentStore()


def get_request_supabase_client(request: Request) -> Client:
    """Create a request-scoped Supabase client and set PostgREST bearer.

    Extracts the Authorization: Bearer <jwt> header if present and configures
    PostgREST to enforce RLS for the user.
    """
    auth_header = request.headers.get("authorization") or request.headers.get("Authorization")
    jwt: str | None = None
    if auth_header and auth_header.lower().startswith("bearer "):
        jwt = auth_header.split(" ", 1)[1].strip()
    return create_request_supabase_client(jwt)


def get_document_store(request: Request) -> DocumentStore:
    """Get the document store configured by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        return get_memory_store()
    return SupabaseDocumentStore(get_request_supabase_client(request))


def get_user_ledger(store: DocumentStore = Depends(get_document_store)) -> UserLedger:
    return UserLedger(store)


def get_category_ledger(store: DocumentStore = Depends(get_document_store)) -> CategoryLedger:
    return CategoryLedger(store)


def get_notepad_ledger(
    store: DocumentStore = Depends(get_document_store),
    categories: CategoryLedger = Depends(get_category_ledger),
) -> NotepadLedger:
    return NotepadLedger(store, categories)


def get_orchestrator(
    users: UserLedger = Depends(get_user_ledger),
    categories: CategoryLedger = Depends(get_category_ledger),
    notepads: NotepadLedger = Depends(get_notepad_ledger),
) -> ConsistencyOrchestrator:
    """Get a request-scoped orchestrator over the three ledgers."""
    return ConsistencyOrchestrator(users, categories, notepads)


def get_onboarding_service(
    users: UserLedger = Depends(get_user_ledger),
    categories: CategoryLedger = Depends(get_category_ledger),
    notepads: NotepadLedger = Depends(get_notepad_ledger),
) -> OnboardingService:
    return OnboardingService(users, categories, notepads)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(http_bearer),
) -> AuthUser:
    """Validate JWT via Supabase and return authenticated identity."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    jwt = credentials.credentials
    if not jwt or len(jwt.split(".")) != 3:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format",
            headers={"WWW-Authenticate": "Bearer"},
        )
    supabase = create_request_supabase_client(jwt)
    try:
        resp = await _run_blocking(lambda: supabase.auth.get_user(jwt))
    except Exception as err:
        error_msg = str(err).lower()
        logger.warning(
            "JWT validation failed",
            extra={
                "error_type": type(err).__name__,
                "error_summary": error_msg[:100] if error_msg else "Unknown error",
                "jwt_length": len(jwt) if jwt else 0,
            }
        )
        if "invalid" in error_msg or "expired" in error_msg:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token is invalid or expired",
                headers={"WWW-Authenticate": "Bearer"},
            ) from err
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        ) from err
    user = getattr(resp, "user", None)
    user_id = getattr(user, "id", None)
    if not user or not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user data",
            headers={"WWW-Authenticate": "Bearer"},
        )
    # OAuth providers put the profile in user_metadata under varying keys
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthUser(
        id=str(user_id),
        email=getattr(user, "email", None) or "",
        name=metadata.get("full_name") or metadata.get("name") or "",
        photo=metadata.get("avatar_url") or metadata.get("picture"),
        role=getattr(user, "role", None),
    )


async def get_current_account(
    identity: AuthUser = Depends(get_current_user),
    onboarding: OnboardingService = Depends(get_onboarding_service),
) -> User:
    """Resolve the authenticated identity to its account, onboarding it on first use."""
    return await onboarding.onboard(identity.id, name=identity.name, photo=identity.photo)
