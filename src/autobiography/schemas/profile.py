"""Pydantic schemas for the writer's profile."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_DAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

TextSize = Literal["normal", "large"]
Contrast = Literal["default", "high"]


class ProfileResponse(BaseModel):
    """Response schema for a profile."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    email: str | None = None
    preferred_name: str | None = None
    start_date: date | None = None
    preferred_email_day: str = "Monday"
    email_paused: bool = False
    disabled: bool = False
    ui_text_size: TextSize = "normal"
    ui_contrast: Contrast = "default"


class ProfileUpdate(BaseModel):
    """Fields a writer may change. Omitted fields are left alone."""

    preferred_name: str | None = Field(default=None, max_length=100)
    preferred_email_day: str | None = None
    ui_text_size: TextSize | None = None
    ui_contrast: Contrast | None = None

    @field_validator("preferred_email_day")
    @classmethod
    def validate_email_day(cls, v: str | None) -> str | None:
        """Only full English day names are accepted."""
        if v is not None and v not in EMAIL_DAYS:
            msg = f"preferred_email_day must be one of {', '.join(EMAIL_DAYS)}"
            raise ValueError(msg)
        return v
