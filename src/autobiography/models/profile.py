"""Profile ORM model."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autobiography.database import Base

if TYPE_CHECKING:
    from autobiography.models.user import User


class Profile(Base):
    """Per-user schedule, preferences and account flags."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("ui_text_size IN ('normal', 'large')", name="ck_profile_text_size"),
        CheckConstraint("ui_contrast IN ('default', 'high')", name="ck_profile_contrast"),
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    preferred_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    start_date: Mapped[date | None] = mapped_column(nullable=True)  # Week 1 begins here
    preferred_email_day: Mapped[str] = mapped_column(String(9), default="Monday")
    email_paused: Mapped[bool] = mapped_column(default=False)
    disabled: Mapped[bool] = mapped_column(default=False, index=True)
    ui_text_size: Mapped[str] = mapped_column(String(10), default="normal")
    ui_contrast: Mapped[str] = mapped_column(String(10), default="default")
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    # Relationships
    user: Mapped[User] = relationship(back_populates="profile")
