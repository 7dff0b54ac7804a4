"""Pydantic models for user API interactions."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from benglish.schemas.common import CamelModel


class UserRead(CamelModel):
    """Public profile returned alongside tokens and by ``/auth/me``."""

    id: uuid.UUID
    username: Optional[str] = None
    email: str
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class UserEnvelope(CamelModel):
    user: UserRead
