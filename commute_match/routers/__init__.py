"""API Routers for the commute matching service."""
from fastapi import APIRouter

from .profile import router as profile_router
from .preferences import router as preferences_router
from .matches import router as matches_router
from .interests import router as interests_router


def create_api_router() -> APIRouter:
    """Create and configure the main API router."""
    api_router = APIRouter(prefix="/api")

    # Register all routers
    api_router.include_router(profile_router, prefix="/profile", tags=["Profile"])
    api_router.include_router(preferences_router, prefix="/preferences", tags=["Preferences"])
    api_router.include_router(matches_router, prefix="/matches", tags=["Matches"])
    api_router.include_router(interests_router, prefix="/interests", tags=["Interests"])

    return api_router
