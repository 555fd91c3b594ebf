"""Versioned API route modules."""

from fastapi import APIRouter

from delve.api.routes.actions import router as actions_router
from delve.api.routes.config import router as config_router
from delve.api.routes.episodes import router as episodes_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(episodes_router, tags=["Episodes"])
api_router.include_router(actions_router, tags=["Actions"])
api_router.include_router(config_router, tags=["Config"])

__all__ = ["api_router"]
