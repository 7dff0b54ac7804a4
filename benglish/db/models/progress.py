"""Learner progress models."""
import enum
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from benglish.db.base import Base


class ProgressStatus(str, enum.Enum):
    LEARNING = "learning"
    LEARNED = "learned"


class ProgressSource(str, enum.Enum):
    """How an item entered the ledger.

    Rows written before the column existed keep ``source = NULL`` and are
    grouped with ``KNOWN`` by every query, without being rewritten.
    """

    LEARNED = "learned"
    KNOWN = "known"


class UserWordProgress(Base):
    """Per-user learning state for one category item."""

    __tablename__ = "user_word_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "category_id", "item_id", name="uq_user_word_progress_item"),
        Index(
            "ix_user_word_progress_review", "user_id", "status", "difficult_count", "last_seen_at"
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id = Column(
        Integer, ForeignKey("word_categories.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    item_id = Column(String(64), nullable=False)

    # Denormalized copy of the item text taken when the row was created
    english = Column(String(255), nullable=False, default="")
    romanian = Column(String(255), nullable=False, default="")

    status = Column(String(20), nullable=False, default=ProgressStatus.LEARNED.value, index=True)
    source = Column(String(20), nullable=True, index=True)
    correct_streak = Column(Integer, nullable=False, default=0)
    difficult_count = Column(Integer, nullable=False, default=0)

    learned_at = Column(DateTime(timezone=True), server_default=func.now())
    last_seen_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class DailyProgress(Base):
    """Per-user, per-day activity counters."""

    __tablename__ = "daily_progress"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_progress_user_date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # YYYY-MM-DD in the learner's local calendar; string ordering is chronological
    date = Column(String(10), nullable=False, index=True)
    learned = Column(Integer, nullable=False, default=0)
    practiced = Column(Integer, nullable=False, default=0)
    reviewed = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
