"""Shared API dependencies."""
from __future__ import annotations

import uuid
from typing import Iterator

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from benglish.config import settings
from benglish.core.security import ACCESS_TOKEN, InvalidTokenError, decode_token
from benglish.db.models.user import User
from benglish.schemas import TokenPayload
from benglish.services.avatar import AvatarStorage, AvatarUpload, decode_avatar_payload
from benglish.services.oauth import GoogleTokenVerifier
from benglish.utils.exceptions import UnauthorizedError

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False
)

_google_verifier_singleton: GoogleTokenVerifier | None = None


def get_db(request: Request) -> Iterator[Session]:
    """Yield a database session for request lifetime."""

    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    token: str | None = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    """Resolve the authenticated user from the Authorization header."""

    if not token:
        raise UnauthorizedError("Unauthorized")

    try:
        payload = decode_token(token, expected_type=ACCESS_TOKEN)
        token_data = TokenPayload.model_validate(payload)
    except (InvalidTokenError, ValidationError, ValueError, KeyError) as exc:
        raise UnauthorizedError("Could not validate credentials") from exc

    user = db.get(User, uuid.UUID(str(token_data.sub)))
    if not user or user.disabled:
        raise UnauthorizedError("Could not validate credentials")
    return user


def get_google_verifier() -> GoogleTokenVerifier:
    """Return a cached Google ID token verifier."""

    global _google_verifier_singleton
    if _google_verifier_singleton is None:
        _google_verifier_singleton = GoogleTokenVerifier()
    return _google_verifier_singleton


def get_avatar_storage() -> AvatarStorage:
    return AvatarStorage()


async def read_avatar_upload(request: Request) -> AvatarUpload:
    """Read the request body as an avatar image, raw or base64 JSON."""

    return decode_avatar_payload(await request.body(), request.headers.get("content-type"))
