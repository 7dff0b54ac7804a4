"""Authentication related schemas."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from benglish.schemas.common import CamelModel
from benglish.schemas.user import UserRead


class RegisterRequest(CamelModel):
    """Password sign-up payload."""

    username: str = Field(min_length=3, max_length=30, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    confirm_password: str

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class GoogleLoginRequest(CamelModel):
    """ID token obtained by the client from Google Sign-In."""

    id_token: str = Field(min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("Email is required")
        return value


class ForgotPasswordResponse(CamelModel):
    message: str


class ChangePasswordRequest(CamelModel):
    """Password change authorised by a reset token instead of a session."""

    token: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=128)


class AuthResponse(CamelModel):
    """Tokens plus the public user profile returned by every sign-in flow."""

    user: UserRead
    access_token: str
    refresh_token: str


class AvatarResponse(CamelModel):
    success: bool = True
    avatar_url: str
    user: UserRead


class TokenPayload(BaseModel):
    """Payload data extracted from access tokens."""

    sub: uuid.UUID
    exp: datetime
    type: str
