"""Shared schema building blocks."""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Accept and emit camelCase keys while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DataResponse(BaseModel, Generic[T]):
    """Envelope used by read endpoints."""

    data: T


class OkResponse(BaseModel):
    ok: bool = True


class MessageResponse(BaseModel):
    message: str


class CountRead(BaseModel):
    count: int
