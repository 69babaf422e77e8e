"""User ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autobiography.database import Base

if TYPE_CHECKING:
    from autobiography.models.entry import Entry
    from autobiography.models.profile import Profile


class User(Base):
    """Sign-in identity. Everything the writer sees lives on Profile."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    is_admin: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    # Relationships
    profile: Mapped[Profile | None] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )
    entries: Mapped[list[Entry]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
