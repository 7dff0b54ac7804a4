"""Daily counter endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from benglish.api.deps import get_current_user, get_db
from benglish.db.models.user import User
from benglish.schemas import DailyCountsRead, DailyIncrementRequest, DataResponse, OkResponse
from benglish.services.daily_progress import DailyProgressService


router = APIRouter(prefix="/daily-progress", tags=["daily-progress"])


@router.get("", response_model=DataResponse[DailyCountsRead])
def get_daily_counts(
    date: str | None = Query(None, description="Day formatted as YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DataResponse[DailyCountsRead]:
    counts = DailyProgressService(db).get_counts(user=current_user, day=date)
    return DataResponse[DailyCountsRead](data=DailyCountsRead(**counts))


@router.post("/increment", response_model=OkResponse)
def increment_daily_counts(
    payload: DailyIncrementRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OkResponse:
    """Add the positive deltas to the day's counters."""

    DailyProgressService(db).increment(user=current_user, day=payload.date, deltas=payload.deltas())
    return OkResponse()
