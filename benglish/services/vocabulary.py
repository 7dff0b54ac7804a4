"""Service helpers for vocabulary endpoints."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from benglish.db.models.vocabulary import WordCategory
from benglish.utils.exceptions import NotFoundError


class CategoryLookupError(NotFoundError):
    """Raised when a category cannot be located."""


class VocabularyService:
    """Read access to word categories."""

    def __init__(self, db: Session):
        self.db = db

    def list_categories(self) -> list[WordCategory]:
        """Return every category ordered by name."""

        stmt = select(WordCategory).order_by(WordCategory.category)
        return list(self.db.scalars(stmt))

    def get_category(self, category_id: int) -> WordCategory:
        category = self.db.get(WordCategory, category_id)
        if not category:
            raise CategoryLookupError("Category not found")
        return category
