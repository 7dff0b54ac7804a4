"""Review batch selection for learned vocabulary."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from benglish.config import settings
from benglish.db.models.progress import ProgressSource, ProgressStatus, UserWordProgress
from benglish.db.models.user import User
from benglish.services.progress import known_source_clause


class ReviewService:
    """Pick which learned items are due for review.

    Actively studied items come first, hardest and least recently seen at the
    top. When they run out, the batch is topped up with items the learner
    declared as already known. Elapsed time plays no part beyond ordering.
    """

    def __init__(self, db: Session, *, hard_cap: int | None = None) -> None:
        self.db = db
        self.hard_cap = hard_cap or settings.REVIEW_BATCH_MAX

    def _primary_filter(self, user: User) -> tuple:
        return (
            UserWordProgress.user_id == user.id,
            UserWordProgress.status == ProgressStatus.LEARNED.value,
            UserWordProgress.source == ProgressSource.LEARNED.value,
        )

    def count_ready(self, *, user: User) -> int:
        """Return the size of the primary pool with a single count query."""

        stmt = select(func.count()).select_from(UserWordProgress).where(*self._primary_filter(user))
        return int(self.db.scalar(stmt) or 0)

    def get_ready(self, *, user: User, limit: int | None = None) -> list[UserWordProgress]:
        """Return up to ``limit`` due records, never repeating an item id."""

        limit = min(limit or settings.REVIEW_BATCH_DEFAULT, self.hard_cap)
        if limit <= 0:
            return []

        primary_stmt = (
            select(UserWordProgress)
            .where(*self._primary_filter(user))
            .order_by(
                UserWordProgress.difficult_count.desc(),
                UserWordProgress.last_seen_at.asc().nullsfirst(),
                UserWordProgress.item_id.asc(),
            )
            .limit(limit)
        )
        selected: list[UserWordProgress] = []
        seen_item_ids: set[str] = set()
        for record in self.db.scalars(primary_stmt):
            if record.item_id in seen_item_ids:
                continue
            selected.append(record)
            seen_item_ids.add(record.item_id)

        missing = limit - len(selected)
        if missing > 0:
            fallback_stmt = select(UserWordProgress).where(
                UserWordProgress.user_id == user.id,
                UserWordProgress.status == ProgressStatus.LEARNED.value,
                known_source_clause(),
            )
            if seen_item_ids:
                fallback_stmt = fallback_stmt.where(UserWordProgress.item_id.notin_(seen_item_ids))
            fallback_stmt = fallback_stmt.order_by(
                UserWordProgress.last_seen_at.asc().nullsfirst(),
                UserWordProgress.item_id.asc(),
            ).limit(missing)
            for record in self.db.scalars(fallback_stmt):
                if record.item_id in seen_item_ids:
                    continue
                selected.append(record)
                seen_item_ids.add(record.item_id)

        logger.debug(
            "Selected review batch",
            user_id=str(user.id),
            requested=limit,
            selected=len(selected),
        )
        return selected[:limit]

    def mark_reviewed(
        self, *, user: User, item_ids: Iterable[str], now: datetime | None = None
    ) -> int:
        """Touch ``last_seen_at`` on every record of the listed items.

        Duplicate ids collapse to one update; an empty list is a no-op.
        """

        unique_ids = sorted({item_id for item_id in item_ids if item_id})
        if not unique_ids:
            return 0

        now = now or datetime.now(timezone.utc)
        stmt = (
            update(UserWordProgress)
            .where(
                UserWordProgress.user_id == user.id,
                UserWordProgress.item_id.in_(unique_ids),
            )
            .values(last_seen_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        logger.info(
            "Marked items reviewed",
            user_id=str(user.id),
            item_count=len(unique_ids),
            rows=result.rowcount,
        )
        return int(result.rowcount or 0)
