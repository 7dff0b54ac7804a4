"""Pydantic schemas for vocabulary endpoints and import tooling."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CategoryItemRead(BaseModel):
    """A single word pair inside a category."""

    id: Optional[str] = None
    english: str
    romanian: str


class CategoryRead(BaseModel):
    """Category listing entry."""

    id: int
    category: str
    total: int
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryDetail(CategoryRead):
    items: List[CategoryItemRead] = Field(default_factory=list)


class ImportItem(BaseModel):
    english: str
    romanian: str

    @field_validator("english", "romanian")
    @classmethod
    def require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class CategoryImport(BaseModel):
    """One entry of a category import file.

    ``total`` is optional; when present it has to match the item count.
    """

    category: str
    total: Optional[int] = Field(default=None, ge=0)
    image: Optional[str] = None
    items: List[ImportItem]

    @field_validator("category")
    @classmethod
    def require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("category name must not be empty")
        return value

    @model_validator(mode="after")
    def total_matches_items(self) -> "CategoryImport":
        if self.total is not None and self.total != len(self.items):
            raise ValueError(
                f"Total must match number of items ({self.total} != {len(self.items)})"
            )
        return self


class CategoryImageUpdate(BaseModel):
    category: str
    image: str

    @field_validator("category")
    @classmethod
    def require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("category name must not be empty")
        return value

    @field_validator("image")
    @classmethod
    def require_http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("image must be an http or https URL")
        return value
