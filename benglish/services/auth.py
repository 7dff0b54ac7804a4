"""Authentication service layer."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from benglish.config import settings
from benglish.core.security import (
    REFRESH_TOKEN,
    InvalidTokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_reset_token,
    get_password_hash,
    verify_password,
)
from benglish.db.models.user import User
from benglish.schemas import AuthResponse, RegisterRequest, UserRead
from benglish.services.oauth import GoogleIdentity
from benglish.utils.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    UnauthorizedError,
)


class AccountExistsError(ConflictError):
    """Raised when attempting to register with an email or username already in use."""


class InvalidCredentialsError(UnauthorizedError):
    """Raised when authentication credentials are invalid."""


class AccountDisabledError(ForbiddenError):
    """Raised when a soft-deleted account tries to sign in."""


class InvalidResetTokenError(BadRequestError):
    """Raised when a password reset token is unknown or expired."""


class AuthService:
    """Encapsulates registration, sign-in and account lifecycle logic."""

    def __init__(self, db: Session):
        self.db = db

    def register_user(self, payload: RegisterRequest) -> User:
        """Create a new password account."""

        existing_user = self.db.scalar(
            select(User).where(or_(User.email == payload.email, User.username == payload.username))
        )
        if existing_user:
            raise AccountExistsError("Email or username already in use")

        user = User(
            email=payload.email,
            username=payload.username,
            hashed_password=get_password_hash(payload.password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise AccountExistsError("Email or username already in use") from exc
        self.db.refresh(user)
        logger.info("Registered user", user_id=str(user.id))
        return user

    def authenticate_user(self, email: str, password: str) -> User:
        """Validate credentials and return the associated user."""

        user = self.db.scalar(select(User).where(User.email == email.strip().lower()))
        if not user:
            raise InvalidCredentialsError("Invalid credentials")
        if user.disabled:
            raise AccountDisabledError("This account has been deleted or disabled.")
        if not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError("Invalid credentials")
        return user

    def authenticate_google(self, identity: GoogleIdentity) -> User:
        """Return the account for a verified Google identity, creating or linking it."""

        user = self.db.scalar(select(User).where(User.google_id == identity.subject))
        if user is None and identity.email:
            user = self.db.scalar(select(User).where(User.email == identity.email))
            if user is not None:
                user.google_id = identity.subject
                user.google_email = identity.email
                logger.info("Linked Google account", user_id=str(user.id))
        if user is None:
            user = User(
                email=identity.email,
                google_id=identity.subject,
                google_email=identity.email,
                avatar_url=identity.picture,
            )
            self.db.add(user)
            logger.info("Creating user from Google sign-in")
        if user.disabled:
            self.db.rollback()
            raise AccountDisabledError("This account has been deleted or disabled.")
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise AccountExistsError("Email or username already in use") from exc
        self.db.refresh(user)
        return user

    def refresh(self, refresh_token: str) -> User:
        """Resolve the user behind a refresh token; disabled accounts are rejected."""

        try:
            payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN)
            user_id = uuid.UUID(str(payload["sub"]))
        except (InvalidTokenError, KeyError, ValueError) as exc:
            raise UnauthorizedError("Unauthorized") from exc
        user = self.db.get(User, user_id)
        if not user or user.disabled:
            raise UnauthorizedError("Unauthorized")
        return user

    def logout(self, refresh_token: str) -> None:
        """Tokens are stateless; an invalid token is still a successful logout."""

        try:
            decode_token(refresh_token, expected_type=REFRESH_TOKEN)
        except InvalidTokenError:
            logger.debug("Logout with invalid refresh token")

    def create_tokens(self, user: User) -> AuthResponse:
        """Generate a fresh access/refresh pair for a user."""

        user_id = uuid.UUID(str(user.id))
        return AuthResponse(
            user=UserRead.model_validate(user),
            access_token=create_access_token(str(user_id)),
            refresh_token=create_refresh_token(str(user_id)),
        )

    def disable_account(self, user: User) -> None:
        user.disable()
        self.db.commit()
        logger.info("Disabled account", user_id=str(user.id))

    def start_password_reset(self, email: str) -> tuple[User, str] | None:
        """Issue a single-use reset token, or return ``None`` for unknown emails."""

        user = self.db.scalar(select(User).where(User.email == email))
        if user is None or user.disabled:
            logger.info("Password reset requested for unknown account")
            return None
        token = generate_reset_token()
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES
        )
        user.issue_reset_token(token, expires_at)
        self.db.commit()
        return user, token

    def change_password_with_token(self, token: str, new_password: str) -> User:
        user = self.db.scalar(select(User).where(User.reset_token == token))
        if user is None:
            raise InvalidResetTokenError("Invalid or expired token")
        if user.reset_token_expired():
            user.clear_reset_token()
            self.db.commit()
            raise InvalidResetTokenError("Invalid or expired token")

        user.hashed_password = get_password_hash(new_password)
        user.clear_reset_token()
        self.db.commit()
        logger.info("Password changed with reset token", user_id=str(user.id))
        return user

    def update_avatar(self, user: User, avatar_url: str) -> str | None:
        """Store the new avatar URL and return the previous one."""

        previous = user.avatar_url
        user.avatar_url = avatar_url
        self.db.commit()
        self.db.refresh(user)
        return previous
