"""Entry ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autobiography.database import Base

if TYPE_CHECKING:
    from autobiography.models.user import User


class Entry(Base):
    """One user's writing for one week."""

    __tablename__ = "entries"
    __table_args__ = (
        UniqueConstraint("user_id", "week", name="uq_entry_user_week"),
        CheckConstraint("week BETWEEN 1 AND 52", name="ck_entry_week_range"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    prompt_key: Mapped[str | None] = mapped_column(String(64), nullable=True)
    week: Mapped[int] = mapped_column()
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content: Mapped[str] = mapped_column(Text, default="")
    # Raw stored value; older rows may hold "draft". See services.lifecycle.normalize_status
    status: Mapped[str | None] = mapped_column(String(20), nullable=True, default="in_progress")
    life_stage: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tone: Mapped[str | None] = mapped_column(String(255), nullable=True)
    key_people: Mapped[str | None] = mapped_column(Text, nullable=True)
    locations: Mapped[str | None] = mapped_column(Text, nullable=True)
    themes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(
        default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True
    )

    # Relationships
    user: Mapped[User] = relationship(back_populates="entries")
