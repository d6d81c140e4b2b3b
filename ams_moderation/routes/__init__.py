"""API route handlers for the moderation service."""

from fastapi import APIRouter

from .moderation import router as moderation_router

# Combine all routers
api_router = APIRouter()
api_router.include_router(moderation_router, tags=["moderation"])

__all__ = ["api_router"]
