"""Celery tasks package."""

from benglish.tasks import notifications

__all__ = ["notifications"]
