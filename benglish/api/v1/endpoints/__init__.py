"""API endpoint modules for v1."""

from benglish.api.v1.endpoints import (
    activity,
    auth,
    categories,
    daily_progress,
    progress,
    review,
)

__all__ = [
    "activity",
    "auth",
    "categories",
    "daily_progress",
    "progress",
    "review",
]
