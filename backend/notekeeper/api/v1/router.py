from __future__ import annotations

from fastapi import APIRouter

from .endpoints import categories, health, notepads, users

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(notepads.router, prefix="/notepads", tags=["notepads"])
