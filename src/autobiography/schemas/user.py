"""Pydantic schemas for user and authentication API endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """Schema for user registration."""

    email: EmailStr = Field(description="Valid email address")
    password: str = Field(
        min_length=8,
        max_length=100,
        description="Password (8-100 characters)",
    )
    preferred_name: str | None = Field(
        default=None, max_length=100, description="Name used in emails"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Store emails lowercase so sign-in is case-insensitive."""
        return v.lower()


class UserResponse(BaseModel):
    """Response schema for user data (excludes password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="User ID")
    email: str = Field(description="Email address")
    is_admin: bool = Field(description="Whether the user is an administrator")
    created_at: datetime = Field(description="When the user was created")


class UserLogin(BaseModel):
    """Schema for user login request."""

    email: str = Field(description="Email address")
    password: str = Field(description="Password")


class Token(BaseModel):
    """Schema for JWT token response."""

    access_token: str = Field(description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class MagicLinkExchange(BaseModel):
    """Schema for exchanging an emailed sign-in link for an access token."""

    token: str = Field(description="Token from the emailed link")


class PasswordResetConfirm(BaseModel):
    """Schema for completing a password reset."""

    token: str = Field(description="Token from the emailed link")
    new_password: str = Field(
        min_length=8,
        max_length=100,
        description="New password (8-100 characters)",
    )
