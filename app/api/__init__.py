"""API router definitions."""

from fastapi import APIRouter

from .moderation import router as moderation_router
from .routes import health_router
from .submissions import router as submissions_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(submissions_router)
api_router.include_router(moderation_router)

__all__ = ["api_router"]
