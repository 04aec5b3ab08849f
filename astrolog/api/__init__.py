"""API router definitions."""

from fastapi import APIRouter

from .image_runs import router as image_runs_router
from .logs import router as logs_router
from .lookups import router as lookups_router
from .routes import health_router
from .sessions import router as sessions_router
from .targets import router as targets_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(targets_router)
api_router.include_router(sessions_router)
api_router.include_router(image_runs_router)
api_router.include_router(lookups_router)
api_router.include_router(logs_router)

__all__ = ["api_router"]
