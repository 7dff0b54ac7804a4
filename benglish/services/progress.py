"""Business logic for the learner progress ledger."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Sequence

from loguru import logger
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from benglish.db.models.progress import ProgressSource, ProgressStatus, UserWordProgress
from benglish.db.models.user import User
from benglish.db.models.vocabulary import WordCategory
from benglish.db.upsert import upsert
from benglish.schemas.progress import LearnItem
from benglish.utils.exceptions import NotFoundError

LEARNED_LIST_MAX = 200
DIFFICULT_THRESHOLD = 2


class CategoryNotFoundError(NotFoundError):
    """Raised when a progress write references an unknown category."""


def known_source_clause():
    """Records the learner already knew, including rows predating ``source``."""

    return or_(
        UserWordProgress.source == ProgressSource.KNOWN.value,
        UserWordProgress.source.is_(None),
    )


class ProgressService:
    """Mutations and aggregate views over ``UserWordProgress`` rows."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def mark_learned_batch(
        self,
        *,
        user: User,
        category_id: int,
        items: Sequence[LearnItem],
        source: ProgressSource = ProgressSource.LEARNED,
        now: datetime | None = None,
    ) -> int:
        """Upsert one ledger row per item and return how many were written.

        Each item is written in its own savepoint, so a failing item is
        logged and skipped without undoing its siblings.
        """

        category = self.db.get(WordCategory, category_id)
        if category is None:
            raise CategoryNotFoundError("Category not found")

        now = now or datetime.now(timezone.utc)
        canonical = category.item_map()
        table = UserWordProgress.__table__
        written = 0
        for item in items:
            fallback = canonical.get(item.item_id, {})
            stmt = upsert(self.db, table).values(
                id=uuid.uuid4(),
                user_id=user.id,
                category_id=category.id,
                item_id=item.item_id,
                english=item.english or fallback.get("english") or "",
                romanian=item.romanian or fallback.get("romanian") or "",
                status=ProgressStatus.LEARNED.value,
                source=source.value,
                correct_streak=1,
                difficult_count=0,
                learned_at=now,
                last_seen_at=now,
                created_at=now,
                updated_at=now,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.user_id, table.c.category_id, table.c.item_id],
                set_={
                    "status": ProgressStatus.LEARNED.value,
                    "source": source.value,
                    "last_seen_at": now,
                    "updated_at": now,
                    "correct_streak": table.c.correct_streak + 1,
                },
            )
            try:
                with self.db.begin_nested():
                    self.db.execute(stmt)
            except SQLAlchemyError as exc:
                logger.warning(
                    "Skipping progress item",
                    user_id=str(user.id),
                    category_id=category.id,
                    item_id=item.item_id,
                    error=str(exc),
                )
                continue
            written += 1

        self.db.commit()
        logger.info(
            "Marked items learned",
            user_id=str(user.id),
            category_id=category.id,
            source=source.value,
            requested=len(items),
            written=written,
        )
        return written

    def mark_wrong_answer(self, *, user: User, category_id: int, item_id: str) -> bool:
        """Bump ``difficult_count`` of an existing row; never creates one."""

        stmt = (
            update(UserWordProgress)
            .where(
                and_(
                    UserWordProgress.user_id == user.id,
                    UserWordProgress.category_id == category_id,
                    UserWordProgress.item_id == item_id,
                )
            )
            .values(
                difficult_count=UserWordProgress.difficult_count + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return bool(result.rowcount)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_learned(
        self,
        *,
        user: User,
        category_id: int | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[UserWordProgress]:
        """Return learned rows, most recently learned first."""

        stmt = select(UserWordProgress).where(
            UserWordProgress.user_id == user.id,
            UserWordProgress.status == ProgressStatus.LEARNED.value,
        )
        if category_id is not None:
            stmt = stmt.where(UserWordProgress.category_id == category_id)
        stmt = (
            stmt.order_by(UserWordProgress.learned_at.desc(), UserWordProgress.item_id.asc())
            .offset(max(skip, 0))
            .limit(min(max(limit, 0), LEARNED_LIST_MAX))
        )
        return list(self.db.scalars(stmt))

    def summary_by_category(self, *, user: User) -> list[dict[str, int]]:
        """Count already-known items per category.

        Rows learned through active study are left out; they surface through
        the review pipeline instead.
        """

        stmt = (
            select(UserWordProgress.category_id, func.count(UserWordProgress.id))
            .where(
                UserWordProgress.user_id == user.id,
                UserWordProgress.status == ProgressStatus.LEARNED.value,
                known_source_clause(),
            )
            .group_by(UserWordProgress.category_id)
            .order_by(UserWordProgress.category_id)
        )
        return [
            {"category_id": category_id, "learned": int(count)}
            for category_id, count in self.db.execute(stmt)
        ]

    def difficult_count(self, *, user: User) -> int:
        stmt = (
            select(func.count())
            .select_from(UserWordProgress)
            .where(
                UserWordProgress.user_id == user.id,
                UserWordProgress.difficult_count >= DIFFICULT_THRESHOLD,
            )
        )
        return int(self.db.scalar(stmt) or 0)
