"""User database model."""
from datetime import datetime, timezone
import uuid

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from benglish.db.base import Base


class User(Base):
    """Represents an application account (password and/or Google login)."""

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(30), unique=True, nullable=True, index=True)
    hashed_password = Column(String(255), nullable=True)

    # Google OAuth
    google_id = Column(String(255), unique=True, nullable=True, index=True)
    google_email = Column(String(255), nullable=True)

    avatar_url = Column(String(1024), nullable=True)

    # Password reset
    reset_token = Column(String(128), nullable=True, index=True)
    reset_expires = Column(DateTime(timezone=True), nullable=True)

    # Soft delete: disabled accounts are kept but can no longer authenticate
    disabled = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def issue_reset_token(self, token: str, expires_at: datetime) -> None:
        """Replace any outstanding reset token with a fresh one."""

        self.reset_token = token
        self.reset_expires = expires_at

    def clear_reset_token(self) -> None:
        self.reset_token = None
        self.reset_expires = None

    def reset_token_expired(self, now: datetime | None = None) -> bool:
        if self.reset_expires is None:
            return True
        now = now or datetime.now(timezone.utc)
        expires = self.reset_expires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return expires < now

    def disable(self) -> None:
        """Soft-delete the account."""

        self.disabled = True
        self.clear_reset_token()

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<User email={self.email!r} disabled={self.disabled!r}>"
