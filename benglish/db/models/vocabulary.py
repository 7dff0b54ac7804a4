"""Vocabulary database models."""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from benglish.db.base import Base
from benglish.db.types import JSONDocumentList


class WordCategory(Base):
    """A themed collection of english/romanian word pairs.

    ``items`` is an ordered list of ``{"id", "english", "romanian"}`` objects.
    Item ids are stable across imports so that progress rows can reference
    them; rows written before ids existed are fixed by ``backfill_item_ids``.
    """

    __tablename__ = "word_categories"

    id = Column(Integer, primary_key=True)
    category = Column(String(255), nullable=False, unique=True, index=True)
    total = Column(Integer, nullable=False, default=0)
    image = Column(String(1024), nullable=True)
    items = Column(JSONDocumentList, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def item_map(self) -> dict[str, dict]:
        """Return items keyed by their id, skipping items without one."""

        return {str(item["id"]): item for item in self.items or [] if item.get("id")}

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<WordCategory category={self.category!r} total={self.total!r}>"
