"""Authentication and account API endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from loguru import logger
from sqlalchemy.orm import Session

from benglish.api.deps import (
    get_avatar_storage,
    get_current_user,
    get_db,
    get_google_verifier,
    read_avatar_upload,
)
from benglish.db.models.user import User
from benglish.schemas import (
    AuthResponse,
    AvatarResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    GoogleLoginRequest,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    UserEnvelope,
    UserRead,
)
from benglish.services.auth import AuthService
from benglish.services.avatar import AvatarStorage, AvatarUpload
from benglish.services.oauth import GoogleTokenVerifier
from benglish.tasks.notifications import send_password_reset_email


router = APIRouter(prefix="/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If this email exists, you will receive a reset link."


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(payload: RegisterRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """Register a new user and sign them in."""

    service = AuthService(db)
    user = service.register_user(payload)
    return service.create_tokens(user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """Authenticate a user and return JWT tokens."""

    service = AuthService(db)
    user = service.authenticate_user(payload.email, payload.password)
    return service.create_tokens(user)


@router.post("/google", response_model=AuthResponse)
def login_with_google(
    payload: GoogleLoginRequest,
    db: Session = Depends(get_db),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
) -> AuthResponse:
    """Sign in with a Google ID token, linking or creating the account."""

    identity = verifier.verify(payload.id_token)
    service = AuthService(db)
    user = service.authenticate_google(identity)
    return service.create_tokens(user)


@router.post("/refresh", response_model=AuthResponse)
def refresh_tokens(payload: RefreshRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """Exchange a refresh token for a new token pair."""

    service = AuthService(db)
    user = service.refresh(payload.refresh_token)
    return service.create_tokens(user)


@router.post("/logout", response_model=MessageResponse)
def logout(payload: RefreshRequest, db: Session = Depends(get_db)) -> MessageResponse:
    AuthService(db).logout(payload.refresh_token)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserEnvelope)
def read_current_user(current_user: User = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=UserRead.model_validate(current_user))


@router.delete("/account", response_model=MessageResponse)
def delete_account(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    """Soft-delete the account; progress data is kept."""

    AuthService(db).disable_account(current_user)
    return MessageResponse(message="Account deleted")


@router.post("/forgot", response_model=ForgotPasswordResponse)
def forgot_password(
    payload: ForgotPasswordRequest, db: Session = Depends(get_db)
) -> ForgotPasswordResponse:
    """Queue a reset email. The answer is the same whether or not the email is known."""

    issued = AuthService(db).start_password_reset(payload.email)
    if issued is not None:
        user, token = issued
        try:
            send_password_reset_email.delay(user.email, token)
        except Exception as exc:  # the answer must not depend on the broker
            logger.error("Could not queue password reset email", error=str(exc))
    return ForgotPasswordResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/change-password-temp", response_model=MessageResponse)
def change_password_with_token(
    payload: ChangePasswordRequest, db: Session = Depends(get_db)
) -> MessageResponse:
    AuthService(db).change_password_with_token(payload.token, payload.new_password)
    return MessageResponse(message="Password changed")


@router.put("/avatar", response_model=AvatarResponse)
def update_avatar(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    upload: AvatarUpload = Depends(read_avatar_upload),
    storage: AvatarStorage = Depends(get_avatar_storage),
) -> AvatarResponse:
    """Store a raw image body or JSON ``{"avatarData": ...}`` as the user's avatar."""

    avatar_url = storage.save(upload)
    previous = AuthService(db).update_avatar(current_user, avatar_url)
    if previous and previous != avatar_url:
        storage.delete(previous)
    return AvatarResponse(avatar_url=avatar_url, user=UserRead.model_validate(current_user))
