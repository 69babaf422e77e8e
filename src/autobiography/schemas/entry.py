"""Pydantic schemas for entries and the derived week views."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from autobiography.schemas.prompt import PromptResponse


class EntryStatus(str, Enum):
    """Normalized persisted status of an entry."""

    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class DisplayStatus(str, Enum):
    """Three-state status shown to writers and administrators."""

    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"


class WeekSort(str, Enum):
    """Caller-selectable orderings for week lists."""

    WEEK = "week"
    TITLE = "title"
    UPDATED = "updated"


class WeekRow(BaseModel):
    """One prompt joined with the user's entry for that week (not persisted)."""

    week: int = Field(description="Week number (1-52)")
    title: str = Field(description="Prompt title, or 'Week N' when the catalog lacks the week")
    display_status: DisplayStatus = Field(description="Derived status")
    scheduled_date: date | None = Field(default=None, description="Date the week opens")
    updated_at: datetime | None = Field(default=None, description="When the entry last changed")
    entry_title: str | None = Field(default=None, description="Title the writer gave the entry")
    has_entry: bool = Field(default=False, description="Whether an entry row exists")
    can_toggle: bool = Field(default=False, description="Whether completion can be toggled")


class WeekCounts(BaseModel):
    """Status bucket counts for a set of week rows."""

    open_count: int = Field(description="Weeks with no written content")
    in_progress_count: int = Field(description="Written weeks not marked complete")
    complete_count: int = Field(description="Weeks marked complete")
    percent_complete: int = Field(description="Complete weeks out of the 52-week plan")


class OpenWeek(BaseModel):
    """A week that still needs work (Open or In Progress)."""

    week: int
    title: str


class PastEntry(BaseModel):
    """A week the user has written something for."""

    id: int
    week: int
    prompt_title: str
    entry_title: str = ""
    updated_at: datetime | None = None


class EntryFields(BaseModel):
    """Editable entry fields shared by save requests and responses."""

    title: str | None = Field(default=None, max_length=255, description="Entry title")
    content: str = Field(default="", description="Entry text")
    life_stage: str | None = Field(default=None, description="Life stage covered")
    tone: str | None = Field(default=None, description="Tone of the story")
    key_people: str | None = Field(default=None, description="People who appear")
    locations: str | None = Field(default=None, description="Places that appear")
    themes: str | None = Field(default=None, description="Themes")


class EntrySave(EntryFields):
    """Schema for saving (upserting) the entry of one week."""

    status: EntryStatus = Field(default=EntryStatus.IN_PROGRESS, description="Entry status")
    autosave: bool = Field(default=False, description="Whether this is a timer-driven save")

    @field_validator("life_stage", "tone", "key_people", "locations", "themes", "title")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Trim optional text fields and store blanks as null."""
        if v is None:
            return None
        v = v.strip()
        return v or None


class EntryResponse(EntryFields):
    """Response schema for a stored entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Entry ID")
    user_id: int = Field(description="Owner user ID")
    prompt_key: str | None = Field(default=None, description="Prompt key at time of saving")
    week: int = Field(description="Week number (1-52)")
    status: EntryStatus = Field(description="Normalized status")
    display_status: DisplayStatus = Field(description="Derived status")
    created_at: datetime | None = Field(default=None, description="When the entry was created")
    updated_at: datetime | None = Field(default=None, description="When the entry last changed")


class EntrySaveResponse(BaseModel):
    """Response for a save request."""

    saved: bool = Field(description="False when an empty auto-save was skipped")
    entry: EntryResponse | None = None


class WeekDetail(BaseModel):
    """Everything the write view needs for one week."""

    week: int
    current_week: int
    prompt: PromptResponse | None = None
    entry: EntryResponse | None = None
    display_status: DisplayStatus
    scheduled_date: date | None = None


class ToggleResponse(BaseModel):
    """Result of toggling an entry's completion."""

    week: int
    changed: bool = Field(description="False when the toggle was a no-op")
    status: EntryStatus | None = None
    display_status: DisplayStatus


class ProgressSummary(WeekCounts):
    """Dashboard header for one user."""

    current_week: int
    start_date: date | None = None
    projected_end_date: date | None = None
    total_weeks: int = Field(description="Rows in the active prompt catalog")
    all_completed: bool


class WeekListResponse(BaseModel):
    """Week rows, optionally bucketed by status."""

    sort: WeekSort
    rows: list[WeekRow] = Field(default_factory=list)
    not_complete: list[WeekRow] | None = None
    complete: list[WeekRow] | None = None
