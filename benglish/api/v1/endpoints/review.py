"""Review batch endpoints."""
from __future__ import annotations

from typing import Any, Union

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from benglish.api.deps import get_current_user, get_db
from benglish.api.v1.endpoints.progress import to_record_read
from benglish.db.models.user import User
from benglish.schemas import (
    CountRead,
    DataResponse,
    OkResponse,
    ProgressRecordRead,
    ReviewCompleteRequest,
)
from benglish.services.review import ReviewService


router = APIRouter(prefix="/review", tags=["review"])


@router.get(
    "/ready",
    response_model=Union[DataResponse[CountRead], DataResponse[list[ProgressRecordRead]]],
)
def get_ready(
    *,
    count_only: bool = Query(False, alias="countOnly"),
    limit: int | None = Query(None, ge=1, description="Clamped to REVIEW_BATCH_MAX"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Return the due review batch, or only the size of the primary pool."""

    service = ReviewService(db)
    if count_only:
        return DataResponse[CountRead](data=CountRead(count=service.count_ready(user=current_user)))
    records = service.get_ready(user=current_user, limit=limit)
    return DataResponse[list[ProgressRecordRead]](data=[to_record_read(r) for r in records])


@router.post("/complete", response_model=OkResponse)
def complete_review(
    body: Any = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OkResponse:
    """Stamp ``lastSeenAt`` on the reviewed items. Malformed bodies are a no-op."""

    payload = ReviewCompleteRequest.from_body(body)
    ReviewService(db).mark_reviewed(user=current_user, item_ids=payload.item_ids)
    return OkResponse()
