"""Pydantic models for learner progress, review and daily counter endpoints."""
from __future__ import annotations

import re
from datetime import date as date_type
from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, Field, field_validator

from benglish.db.models.progress import ProgressSource
from benglish.schemas.common import CamelModel

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_day(value: str) -> str:
    """Return ``value`` if it is a real calendar day written as YYYY-MM-DD."""

    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("date must be formatted as YYYY-MM-DD")
    try:
        date_type.fromisoformat(value)
    except ValueError as exc:
        raise ValueError("date is not a valid calendar day") from exc
    return value


def _coerce_item_id(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


class LearnItem(CamelModel):
    """An item being marked as learned; older clients send ``id`` instead of ``itemId``."""

    item_id: str = Field(
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("itemId", "id", "item_id"),
    )
    english: Optional[str] = None
    romanian: Optional[str] = None

    @field_validator("item_id", mode="before")
    @classmethod
    def coerce_item_id(cls, value: Any) -> Any:
        return _coerce_item_id(value)


class LearnRequest(CamelModel):
    category_id: int
    items: List[LearnItem] = Field(min_length=1)
    source: ProgressSource = ProgressSource.LEARNED


class WrongAnswerRequest(CamelModel):
    category_id: int
    item_id: str = Field(
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("itemId", "id", "item_id"),
    )

    @field_validator("item_id", mode="before")
    @classmethod
    def coerce_item_id(cls, value: Any) -> Any:
        return _coerce_item_id(value)


class ReviewCompleteRequest(CamelModel):
    """Items whose review just finished.

    The body is decoded leniently: entries may be ``{"itemId": ...}``,
    ``{"id": ...}`` or bare strings, and anything else is ignored, so a
    malformed list degrades to an empty one instead of an error.
    """

    item_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_body(cls, body: Any) -> "ReviewCompleteRequest":
        entries = body.get("items") if isinstance(body, dict) else None
        if not isinstance(entries, list):
            return cls()
        item_ids: list[str] = []
        for entry in entries:
            if isinstance(entry, dict):
                entry = entry.get("itemId", entry.get("id"))
            entry = _coerce_item_id(entry)
            if isinstance(entry, str) and entry:
                item_ids.append(entry)
        return cls(item_ids=item_ids)


class DailyIncrementRequest(CamelModel):
    date: str
    learned_delta: Optional[int] = None
    practiced_delta: Optional[int] = None
    reviewed_delta: Optional[int] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        return validate_day(value)

    def deltas(self) -> dict[str, Optional[int]]:
        return {
            "learned": self.learned_delta,
            "practiced": self.practiced_delta,
            "reviewed": self.reviewed_delta,
        }


class ProgressRecordRead(CamelModel):
    """A ledger row as returned by the learned list and the review batch."""

    category: int
    item_id: str
    english: str
    romanian: str
    source: Optional[str] = None
    correct_streak: int = 0
    difficult_count: int = 0
    learned_at: Optional[datetime] = None
    last_seen_at: Optional[datetime] = None


class CategorySummaryRead(CamelModel):
    category_id: int = Field(alias="_id")
    learned: int


class DailyCountsRead(CamelModel):
    learned: int = 0
    practiced: int = 0
    reviewed: int = 0
