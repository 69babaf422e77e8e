"""Pydantic schemas for request/response validation."""

from autobiography.schemas.admin import (
    AdminAction,
    AdminActionRequest,
    AdminActionResponse,
    AdminUserDetail,
    ReminderSummary,
    UserExport,
    UserOverview,
    UsersOverviewResponse,
)
from autobiography.schemas.email import EmailMessage, EmailSendResult
from autobiography.schemas.entry import (
    DisplayStatus,
    EntryResponse,
    EntrySave,
    EntrySaveResponse,
    EntryStatus,
    OpenWeek,
    PastEntry,
    ProgressSummary,
    ToggleResponse,
    WeekCounts,
    WeekDetail,
    WeekListResponse,
    WeekRow,
    WeekSort,
)
from autobiography.schemas.profile import ProfileResponse, ProfileUpdate
from autobiography.schemas.prompt import PromptListResponse, PromptResponse
from autobiography.schemas.user import (
    MagicLinkExchange,
    PasswordResetConfirm,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
)

__all__ = [
    # Admin and job schemas
    "AdminAction",
    "AdminActionRequest",
    "AdminActionResponse",
    "AdminUserDetail",
    "ReminderSummary",
    "UserExport",
    "UserOverview",
    "UsersOverviewResponse",
    # Email provider schemas
    "EmailMessage",
    "EmailSendResult",
    # Entry and week schemas
    "DisplayStatus",
    "EntryResponse",
    "EntrySave",
    "EntrySaveResponse",
    "EntryStatus",
    "OpenWeek",
    "PastEntry",
    "ProgressSummary",
    "ToggleResponse",
    "WeekCounts",
    "WeekDetail",
    "WeekListResponse",
    "WeekRow",
    "WeekSort",
    # Profile and prompt schemas
    "ProfileResponse",
    "ProfileUpdate",
    "PromptListResponse",
    "PromptResponse",
    # User schemas
    "MagicLinkExchange",
    "PasswordResetConfirm",
    "Token",
    "UserCreate",
    "UserLogin",
    "UserResponse",
]
