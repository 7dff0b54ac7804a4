"""Per-day activity counters and the calendar view built from them."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Mapping

from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from benglish.db.models.progress import DailyProgress
from benglish.db.models.user import User
from benglish.db.upsert import upsert
from benglish.schemas.progress import validate_day
from benglish.utils.exceptions import BadRequestError

COUNTER_FIELDS = ("learned", "practiced", "reviewed")


class DailyProgressService:
    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _check_day(day: str | None) -> str:
        try:
            return validate_day(day)  # type: ignore[arg-type]
        except ValueError as exc:
            raise BadRequestError(str(exc)) from exc

    def get_counts(self, *, user: User, day: str | None) -> dict[str, int]:
        """Return the counters for ``day``; zeros when nothing was recorded."""

        day = self._check_day(day)
        row = self.db.scalars(
            select(DailyProgress).where(DailyProgress.user_id == user.id, DailyProgress.date == day)
        ).first()
        if row is None:
            return {name: 0 for name in COUNTER_FIELDS}
        return {name: int(getattr(row, name) or 0) for name in COUNTER_FIELDS}

    def increment(
        self, *, user: User, day: str | None, deltas: Mapping[str, int | None]
    ) -> dict[str, int]:
        """Atomically add the positive deltas to the row for ``day``.

        Zero and negative deltas are dropped rather than subtracted. Returns
        the deltas that were applied (empty when the call was a no-op).
        """

        day = self._check_day(day)
        accepted = {
            name: int(value)
            for name, value in deltas.items()
            if name in COUNTER_FIELDS and value is not None and value > 0
        }
        if not accepted:
            return {}

        now = datetime.now(timezone.utc)
        table = DailyProgress.__table__
        values = {name: accepted.get(name, 0) for name in COUNTER_FIELDS}
        stmt = upsert(self.db, table).values(
            id=uuid.uuid4(),
            user_id=user.id,
            date=day,
            created_at=now,
            updated_at=now,
            **values,
        )
        set_ = {name: table.c[name] + delta for name, delta in accepted.items()}
        set_["updated_at"] = now
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.user_id, table.c.date],
            set_=set_,
        )
        self.db.execute(stmt)
        self.db.commit()
        logger.debug("Incremented daily progress", user_id=str(user.id), date=day, **accepted)
        return accepted

    def activity_days(self, *, user: User) -> list[str]:
        """Return every day with at least one non-zero counter, oldest first."""

        stmt = (
            select(DailyProgress.date)
            .where(
                DailyProgress.user_id == user.id,
                or_(
                    DailyProgress.learned > 0,
                    DailyProgress.practiced > 0,
                    DailyProgress.reviewed > 0,
                ),
            )
            .order_by(DailyProgress.date.asc())
        )
        return list(self.db.scalars(stmt))
