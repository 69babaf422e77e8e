"""Prompt ORM model."""

from sqlalchemy import JSON, CheckConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from autobiography.database import Base


class Prompt(Base):
    """The shared writing topic for one week of the year-long plan."""

    __tablename__ = "prompts"
    __table_args__ = (CheckConstraint("week BETWEEN 1 AND 52", name="ck_prompt_week_range"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    prompt_key: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    week: Mapped[int] = mapped_column(unique=True, index=True)
    title: Mapped[str] = mapped_column(String(255))
    category: Mapped[str] = mapped_column(String(100), default="")
    coaching: Mapped[str] = mapped_column(Text, default="")
    questions: Mapped[list[str]] = mapped_column(JSON, default=list)
    helpful_followups: Mapped[list[str]] = mapped_column(JSON, default=list)
    active: Mapped[bool] = mapped_column(default=True, index=True)
