"""Endpoints for the learner progress ledger."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from benglish.api.deps import get_current_user, get_db
from benglish.db.models.progress import UserWordProgress
from benglish.db.models.user import User
from benglish.schemas import (
    CategorySummaryRead,
    CountRead,
    DataResponse,
    LearnRequest,
    OkResponse,
    ProgressRecordRead,
    WrongAnswerRequest,
)
from benglish.services.progress import LEARNED_LIST_MAX, ProgressService


router = APIRouter(prefix="/progress", tags=["progress"])


def to_record_read(record: UserWordProgress) -> ProgressRecordRead:
    return ProgressRecordRead(
        category=record.category_id,
        item_id=record.item_id,
        english=record.english,
        romanian=record.romanian,
        source=record.source,
        correct_streak=record.correct_streak,
        difficult_count=record.difficult_count,
        learned_at=record.learned_at,
        last_seen_at=record.last_seen_at,
    )


@router.post("/learn", response_model=OkResponse)
def mark_learned(
    payload: LearnRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OkResponse:
    """Mark a batch of category items as learned (or already known)."""

    ProgressService(db).mark_learned_batch(
        user=current_user,
        category_id=payload.category_id,
        items=payload.items,
        source=payload.source,
    )
    return OkResponse()


@router.get("/summary", response_model=DataResponse[list[CategorySummaryRead]])
def get_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DataResponse[list[CategorySummaryRead]]:
    rows = ProgressService(db).summary_by_category(user=current_user)
    return DataResponse[list[CategorySummaryRead]](
        data=[CategorySummaryRead(category_id=row["category_id"], learned=row["learned"]) for row in rows]
    )


@router.get("/learned", response_model=DataResponse[list[ProgressRecordRead]])
def list_learned(
    *,
    category_id: int | None = Query(None, alias="categoryId"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=0, description=f"Clamped to {LEARNED_LIST_MAX}"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DataResponse[list[ProgressRecordRead]]:
    """Return learned records, most recently learned first."""

    records = ProgressService(db).list_learned(
        user=current_user, category_id=category_id, skip=skip, limit=limit
    )
    return DataResponse[list[ProgressRecordRead]](data=[to_record_read(r) for r in records])


@router.get("/difficult", response_model=DataResponse[CountRead])
def get_difficult_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DataResponse[CountRead]:
    count = ProgressService(db).difficult_count(user=current_user)
    return DataResponse[CountRead](data=CountRead(count=count))


@router.post("/difficult-wrong", response_model=OkResponse)
def record_wrong_answer(
    payload: WrongAnswerRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OkResponse:
    """Count a wrong answer against an existing record; unknown items are ignored."""

    ProgressService(db).mark_wrong_answer(
        user=current_user, category_id=payload.category_id, item_id=payload.item_id
    )
    return OkResponse()
