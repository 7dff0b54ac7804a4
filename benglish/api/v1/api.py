"""API router for version 1."""
from fastapi import APIRouter

from benglish.api.v1.endpoints import (
    activity,
    auth,
    categories,
    daily_progress,
    progress,
    review,
)


api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(categories.router)
api_router.include_router(progress.router)
api_router.include_router(review.router)
api_router.include_router(activity.router)
api_router.include_router(daily_progress.router)
