"""Learning calendar endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from benglish.api.deps import get_current_user, get_db
from benglish.db.models.user import User
from benglish.schemas import DataResponse
from benglish.services.daily_progress import DailyProgressService


router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("/days", response_model=DataResponse[list[str]])
def get_activity_days(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DataResponse[list[str]]:
    """Return the days with any recorded activity, oldest first."""

    days = DailyProgressService(db).activity_days(user=current_user)
    return DataResponse[list[str]](data=days)
