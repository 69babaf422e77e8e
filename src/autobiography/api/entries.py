"""Entry API endpoints: the signed-in writer's weeks, progress and saves."""

import logging
from collections.abc import Sequence
from datetime import UTC, date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autobiography.api.prompts import load_active_prompts, load_prompt
from autobiography.database import get_db
from autobiography.models.entry import Entry
from autobiography.models.user import User
from autobiography.schemas.entry import (
    EntryResponse,
    EntrySave,
    EntrySaveResponse,
    OpenWeek,
    PastEntry,
    ProgressSummary,
    ToggleResponse,
    WeekDetail,
    WeekListResponse,
    WeekSort,
)
from autobiography.schemas.prompt import PromptResponse
from autobiography.services import lifecycle
from autobiography.utils.security import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/entries", tags=["entries"])

WeekNumber = Annotated[int, Path(ge=1, le=52, description="Week number")]


def entry_to_response(entry: Entry) -> EntryResponse:
    """Convert an Entry model to EntryResponse schema."""
    return EntryResponse(
        id=entry.id,
        user_id=entry.user_id,
        prompt_key=entry.prompt_key,
        week=entry.week,
        title=entry.title,
        content=entry.content or "",
        status=lifecycle.normalize_status(entry.status),
        display_status=lifecycle.display_status(entry),
        life_stage=entry.life_stage,
        tone=entry.tone,
        key_people=entry.key_people,
        locations=entry.locations,
        themes=entry.themes,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


def start_date_of(user: User) -> date | None:
    """The writer's plan start date, or None without a profile."""
    return user.profile.start_date if user.profile is not None else None


async def load_user_entries(db: AsyncSession, user_id: int) -> Sequence[Entry]:
    """All entries of one user."""
    result = await db.execute(select(Entry).where(Entry.user_id == user_id))
    return result.scalars().all()


async def load_entry(db: AsyncSession, user_id: int, week: int) -> Entry | None:
    """The user's entry for one week, if any."""
    result = await db.execute(select(Entry).where(Entry.user_id == user_id, Entry.week == week))
    return result.scalar_one_or_none()


@router.get("/summary", response_model=ProgressSummary)
async def get_summary(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ProgressSummary:
    """Dashboard header: current week, schedule and completion counts."""
    start_date = start_date_of(current_user)
    prompts = await load_active_prompts(db)
    entries = await load_user_entries(db, current_user.id)

    rows = lifecycle.build_week_rows(prompts, entries, start_date)
    counts = lifecycle.aggregate_counts(rows)

    return ProgressSummary(
        **counts.model_dump(),
        current_week=lifecycle.current_week(start_date, datetime.now(UTC)),
        start_date=start_date,
        projected_end_date=lifecycle.projected_end_date(start_date),
        total_weeks=len(rows),
        all_completed=lifecycle.all_completed(rows),
    )


@router.get("/weeks", response_model=WeekListResponse)
async def list_week_rows(
    current_user: CurrentUser,
    sort: WeekSort = Query(WeekSort.WEEK, description="week, title or updated"),
    group: bool = Query(False, description="Also bucket rows into not complete / complete"),
    db: AsyncSession = Depends(get_db),
) -> WeekListResponse:
    """One row per active prompt with the writer's status for that week."""
    prompts = await load_active_prompts(db)
    entries = await load_user_entries(db, current_user.id)

    rows = lifecycle.build_week_rows(prompts, entries, start_date_of(current_user))
    response = WeekListResponse(sort=sort, rows=lifecycle.sort_week_rows(rows, sort))
    if group:
        response.not_complete, response.complete = lifecycle.group_week_rows(rows)
    return response


@router.get("/open", response_model=list[OpenWeek])
async def list_open_weeks(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> list[OpenWeek]:
    """Weeks that are not complete yet (Open and In Progress)."""
    prompts = await load_active_prompts(db)
    entries = await load_user_entries(db, current_user.id)
    return lifecycle.open_weeks(lifecycle.build_week_rows(prompts, entries))


@router.get("/past", response_model=list[PastEntry])
async def list_past_entries(
    current_user: CurrentUser,
    sort: WeekSort = Query(WeekSort.WEEK, description="week, title or updated"),
    db: AsyncSession = Depends(get_db),
) -> list[PastEntry]:
    """Weeks the writer has already written something for."""
    prompts = await load_active_prompts(db)
    entries = await load_user_entries(db, current_user.id)
    return lifecycle.past_entries(prompts, entries, sort)


@router.get("/{week}", response_model=WeekDetail)
async def get_week(
    current_user: CurrentUser,
    week: WeekNumber,
    db: AsyncSession = Depends(get_db),
) -> WeekDetail:
    """Prompt and entry for one week of the write view."""
    start_date = start_date_of(current_user)
    prompt = await load_prompt(db, week)
    entry = await load_entry(db, current_user.id, week)

    return WeekDetail(
        week=week,
        current_week=lifecycle.current_week(start_date, datetime.now(UTC)),
        prompt=PromptResponse.model_validate(prompt) if prompt else None,
        entry=entry_to_response(entry) if entry else None,
        display_status=lifecycle.display_status(entry),
        scheduled_date=lifecycle.scheduled_date(start_date, week),
    )


@router.put("/{week}", response_model=EntrySaveResponse)
async def save_entry(
    current_user: CurrentUser,
    entry_data: EntrySave,
    week: WeekNumber,
    db: AsyncSession = Depends(get_db),
) -> EntrySaveResponse:
    """Create or update the writer's entry for one week.

    Auto-saves with neither a title nor content are skipped so the timer
    never creates blank entries. Concurrent saves are last-write-wins.

    Raises:
        HTTPException 404: If the week has no active prompt
    """
    if entry_data.autosave and not (entry_data.title or entry_data.content.strip()):
        return EntrySaveResponse(saved=False)

    prompt = await load_prompt(db, week)
    if prompt is None:
        raise HTTPException(status_code=404, detail=f"No prompt for week {week}")

    now = datetime.now(UTC)
    entry = await load_entry(db, current_user.id, week)
    if entry is None:
        entry = Entry(user_id=current_user.id, week=week, created_at=now)
        db.add(entry)

    entry.prompt_key = prompt.prompt_key
    entry.title = entry_data.title
    entry.content = entry_data.content
    entry.status = entry_data.status.value
    entry.life_stage = entry_data.life_stage
    entry.tone = entry_data.tone
    entry.key_people = entry_data.key_people
    entry.locations = entry_data.locations
    entry.themes = entry_data.themes
    entry.updated_at = now

    await db.flush()
    await db.refresh(entry)

    logger.debug(
        "Saved week %s for user %s (autosave=%s)", week, current_user.id, entry_data.autosave
    )
    return EntrySaveResponse(saved=True, entry=entry_to_response(entry))


@router.post("/{week}/toggle", response_model=ToggleResponse)
async def toggle_entry_complete(
    current_user: CurrentUser,
    week: WeekNumber,
    db: AsyncSession = Depends(get_db),
) -> ToggleResponse:
    """Flip a written week between in progress and complete.

    Weeks with no entry or blank content are left untouched.
    """
    entry = await load_entry(db, current_user.id, week)
    next_status = lifecycle.toggle_complete(entry)

    if next_status is None:
        return ToggleResponse(
            week=week,
            changed=False,
            status=lifecycle.normalize_status(entry.status) if entry else None,
            display_status=lifecycle.display_status(entry),
        )

    # Only the status column changes
    entry.status = next_status.value
    entry.updated_at = datetime.now(UTC)
    await db.flush()

    return ToggleResponse(
        week=week,
        changed=True,
        status=next_status,
        display_status=lifecycle.display_status(entry),
    )
