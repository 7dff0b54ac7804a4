"""Pydantic schemas package."""

from benglish.schemas.auth import (
    AuthResponse,
    AvatarResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    GoogleLoginRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPayload,
)
from benglish.schemas.common import CountRead, DataResponse, MessageResponse, OkResponse
from benglish.schemas.progress import (
    CategorySummaryRead,
    DailyCountsRead,
    DailyIncrementRequest,
    LearnItem,
    LearnRequest,
    ProgressRecordRead,
    ReviewCompleteRequest,
    WrongAnswerRequest,
)
from benglish.schemas.user import UserEnvelope, UserRead
from benglish.schemas.vocabulary import (
    CategoryDetail,
    CategoryImageUpdate,
    CategoryImport,
    CategoryItemRead,
    CategoryRead,
)

__all__ = [
    "AuthResponse",
    "AvatarResponse",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "ForgotPasswordResponse",
    "GoogleLoginRequest",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "TokenPayload",
    "CountRead",
    "DataResponse",
    "MessageResponse",
    "OkResponse",
    "CategorySummaryRead",
    "DailyCountsRead",
    "DailyIncrementRequest",
    "LearnItem",
    "LearnRequest",
    "ProgressRecordRead",
    "ReviewCompleteRequest",
    "WrongAnswerRequest",
    "UserEnvelope",
    "UserRead",
    "CategoryDetail",
    "CategoryImageUpdate",
    "CategoryImport",
    "CategoryItemRead",
    "CategoryRead",
]
