"""
API v1 package.

Contains versioned API routes for the event registration API.
"""

from fastapi import APIRouter

from src.api.v1.admin import router as admin_router
from src.api.v1.event import router as event_router
from src.api.v1.routes import router as public_router

router = APIRouter()
router.include_router(public_router)
router.include_router(admin_router)
router.include_router(event_router)

__all__ = ["router"]
