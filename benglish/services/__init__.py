"""Service layer package."""

from benglish.services.auth import AuthService
from benglish.services.content_import import ContentImportService
from benglish.services.daily_progress import DailyProgressService
from benglish.services.progress import ProgressService
from benglish.services.review import ReviewService
from benglish.services.vocabulary import VocabularyService

__all__ = [
    "AuthService",
    "ContentImportService",
    "DailyProgressService",
    "ProgressService",
    "ReviewService",
    "VocabularyService",
]
