from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from notekeeper import __version__
from notekeeper.config import settings
from notekeeper.core.repositories.document_store import Collection, DocumentStore
from notekeeper.dependencies import get_document_store
from notekeeper.errors import StoreFailure

router = APIRouter()


@router.get("/")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "service": "notekeeper-api",
            "version": __version__,
        }
    )


@router.get("/ready")
async def readiness_check(store: DocumentStore = Depends(get_document_store)):
    """Readiness check endpoint."""
    db_status = "connected"
    try:
        await store.find_one(Collection.USERS.value, {"provider_id": "__readiness_probe__"})
    except StoreFailure as e:
        db_status = f"error: {e.message}"

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "database": db_status,
            "store_backend": settings.store_backend,
            "api_prefix": settings.api_prefix,
        }
    )
