"""Celery application instance and configuration."""
from __future__ import annotations

from celery import Celery

from benglish.config import settings


def _redis_fallback(url) -> str:
    """Celery shares the cache Redis unless a dedicated URL is configured."""
    return str(url if url is not None else settings.REDIS_URL)


celery_app = Celery(
    "benglish",
    broker=_redis_fallback(settings.CELERY_BROKER_URL),
    backend=_redis_fallback(settings.CELERY_RESULT_BACKEND),
    include=["benglish.tasks.notifications"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Europe/Bucharest",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
)

__all__ = ["celery_app"]
