"""API route definitions.

Uses a factory pattern to avoid import-time settings loading.
This allows tests to import modules without requiring all environment
variables to be configured upfront.
"""

from fastapi import APIRouter

from vidshare.api.routes.comments import router as comments_router
from vidshare.api.routes.dashboard import router as dashboard_router
from vidshare.api.routes.health import router as health_router
from vidshare.api.routes.likes import router as likes_router
from vidshare.api.routes.playlists import router as playlists_router
from vidshare.api.routes.subscriptions import router as subscriptions_router
from vidshare.api.routes.tweets import router as tweets_router
from vidshare.api.routes.users import router as users_router
from vidshare.api.routes.videos import router as videos_router


def create_api_router() -> APIRouter:
    """Create and configure the API router.

    Returns:
        Configured APIRouter with all routes registered.
    """
    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(users_router, tags=["users"])
    api_router.include_router(videos_router, tags=["videos"])
    api_router.include_router(comments_router, tags=["comments"])
    api_router.include_router(tweets_router, tags=["tweets"])
    api_router.include_router(playlists_router, tags=["playlists"])
    api_router.include_router(likes_router, tags=["likes"])
    api_router.include_router(subscriptions_router, tags=["subscriptions"])
    api_router.include_router(dashboard_router, tags=["dashboard"])
    return api_router


__all__ = ["create_api_router"]
