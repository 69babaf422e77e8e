"""Prompt catalog API endpoints."""

from collections.abc import Sequence

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autobiography.database import get_db
from autobiography.models.prompt import Prompt
from autobiography.schemas.prompt import PromptListResponse, PromptResponse
from autobiography.utils.security import CurrentUser

router = APIRouter(prefix="/prompts", tags=["prompts"])


async def load_active_prompts(db: AsyncSession) -> Sequence[Prompt]:
    """Active prompts ordered by week."""
    result = await db.execute(
        select(Prompt).where(Prompt.active.is_(True)).order_by(Prompt.week.asc())
    )
    return result.scalars().all()


async def load_prompt(db: AsyncSession, week: int) -> Prompt | None:
    """The active prompt for one week, if seeded."""
    result = await db.execute(
        select(Prompt).where(Prompt.week == week, Prompt.active.is_(True))
    )
    return result.scalar_one_or_none()


@router.get("", response_model=PromptListResponse)
async def list_prompts(
    current_user: CurrentUser,  # noqa: ARG001 - Required for auth enforcement
    db: AsyncSession = Depends(get_db),
) -> PromptListResponse:
    """List the active prompt catalog in week order."""
    prompts = await load_active_prompts(db)
    return PromptListResponse(
        total=len(prompts),
        results=[PromptResponse.model_validate(p) for p in prompts],
    )


@router.get("/{week}", response_model=PromptResponse)
async def get_prompt(
    current_user: CurrentUser,  # noqa: ARG001 - Required for auth enforcement
    week: int = Path(ge=1, le=52, description="Week number"),
    db: AsyncSession = Depends(get_db),
) -> PromptResponse:
    """Get the prompt for one week."""
    prompt = await load_prompt(db, week)
    if prompt is None:
        raise HTTPException(status_code=404, detail=f"No prompt for week {week}")
    return PromptResponse.model_validate(prompt)
