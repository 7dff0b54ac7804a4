"""Database models package."""
from benglish.db.models.user import User
from benglish.db.models.vocabulary import WordCategory
from benglish.db.models.progress import DailyProgress, UserWordProgress

__all__ = [
    "User",
    "WordCategory",
    "UserWordProgress",
    "DailyProgress",
]
