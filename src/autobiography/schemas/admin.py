"""Pydantic schemas for administrator and scheduled-job endpoints."""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from autobiography.schemas.entry import DisplayStatus, WeekCounts, WeekRow


class AdminAction(str, Enum):
    """Account actions an administrator can perform."""

    SET_START_DATE = "set_start_date"
    SET_EMAIL_PAUSED = "set_email_paused"
    RESET_WEEK = "reset_week"
    RESET_ALL = "reset_all"
    SET_DISABLED = "set_disabled"
    SEND_MAGIC_LINK = "send_magic_link"
    SEND_PASSWORD_RESET = "send_password_reset"


class AdminActionRequest(BaseModel):
    """Body of POST /api/admin/auth-actions.

    Each action reads only the fields it needs.
    """

    action: AdminAction
    target_user_id: int = Field(ge=1, description="User the action applies to")
    start_date: date | None = Field(default=None, description="For set_start_date")
    email_paused: bool | None = Field(default=None, description="For set_email_paused")
    disabled: bool | None = Field(default=None, description="For set_disabled")
    week: int | None = Field(default=None, ge=1, le=52, description="For reset_week")

    @model_validator(mode="after")
    def check_action_fields(self) -> "AdminActionRequest":
        """Require the field each action depends on."""
        required = {
            AdminAction.SET_EMAIL_PAUSED: "email_paused",
            AdminAction.SET_DISABLED: "disabled",
            AdminAction.RESET_WEEK: "week",
        }.get(self.action)
        if required and getattr(self, required) is None:
            msg = f"{required} is required for {self.action.value}"
            raise ValueError(msg)
        return self


class AdminActionResponse(BaseModel):
    """Uniform result of an administrator action."""

    ok: bool
    error: str | None = None
    result: Any | None = None


class UserOverview(WeekCounts):
    """One row of the administrator's user list."""

    id: int
    email: str | None = None
    preferred_name: str | None = None
    start_date: date | None = None
    current_week: int | None = Field(default=None, description="Null without a start date")
    email_paused: bool = False
    disabled: bool = False
    last_activity: datetime | None = None


class UsersOverviewResponse(BaseModel):
    ok: bool = True
    result: list[UserOverview] = Field(default_factory=list)


class AdminUserDetail(BaseModel):
    """One user's profile and weeks as seen by an administrator."""

    ok: bool = True
    user_id: int
    email: str | None = None
    preferred_name: str | None = None
    start_date: date | None = None
    current_week: int | None = None
    counts: WeekCounts
    weeks: list[WeekRow] = Field(default_factory=list)


class ExportedEntry(BaseModel):
    week: int
    prompt_title: str
    status: DisplayStatus
    content: str = ""
    updated_at: datetime | None = None


class ExportedUser(BaseModel):
    id: int
    preferred_name: str | None = None
    email: str | None = None
    start_date: date | None = None


class UserExport(BaseModel):
    """Downloadable JSON copy of one user's writing."""

    exported_at: datetime
    user: ExportedUser
    entries: list[ExportedEntry] = Field(default_factory=list)


class ReminderSummary(BaseModel):
    """Counters returned by the weekly email job."""

    ok: bool = True
    sent: int = 0
    skipped_paused: int = 0
    skipped_no_start: int = 0
    skipped_no_email: int = 0
    skipped_no_prompt: int = 0
    failed: int = 0
