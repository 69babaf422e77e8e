"""Administrator API endpoints: user progress, exports and account actions."""

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autobiography.api.entries import load_user_entries
from autobiography.api.prompts import load_active_prompts
from autobiography.config import get_settings
from autobiography.database import get_db
from autobiography.models.entry import Entry
from autobiography.models.user import User
from autobiography.schemas.admin import (
    AdminAction,
    AdminActionRequest,
    AdminActionResponse,
    AdminUserDetail,
    ExportedEntry,
    ExportedUser,
    UserExport,
    UserOverview,
    UsersOverviewResponse,
)
from autobiography.services import lifecycle
from autobiography.services.base import APIError
from autobiography.services.email import (
    ResendClient,
    get_email_client,
    password_reset_email,
    sign_in_link_email,
)
from autobiography.utils.security import (
    MAGIC_LINK,
    RECOVERY,
    CurrentAdmin,
    create_auth_link_token,
    load_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class ActionFailed(Exception):
    """An account action that could not be carried out."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


def failure(message: str, status_code: int) -> JSONResponse:
    """Render a failed admin request as {"ok": false, "error": ...}."""
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def current_week_or_none(start_date) -> int | None:
    """Administrators see no week at all for writers without a start date."""
    if start_date is None:
        return None
    return lifecycle.current_week(start_date, datetime.now(UTC))


def matches_query(overview: UserOverview, query: str) -> bool:
    q = query.strip().lower()
    if not q:
        return True
    haystack = (overview.email or "", overview.preferred_name or "", str(overview.id))
    return any(q in value.lower() for value in haystack)


@router.get("/users-overview", response_model=UsersOverviewResponse)
async def users_overview(
    current_admin: CurrentAdmin,  # noqa: ARG001 - Required for auth enforcement
    q: str = Query("", description="Filter on email, name or user ID"),
    db: AsyncSession = Depends(get_db),
) -> UsersOverviewResponse:
    """Progress of every non-admin user, most recently active first."""
    users_result = await db.execute(
        select(User).where(User.is_admin.is_(False)).options(selectinload(User.profile))
    )
    users = users_result.scalars().all()

    prompts = await load_active_prompts(db)

    entries_by_user: dict[int, list[Entry]] = defaultdict(list)
    user_ids = [u.id for u in users]
    if user_ids:
        entries_result = await db.execute(select(Entry).where(Entry.user_id.in_(user_ids)))
        for entry in entries_result.scalars().all():
            entries_by_user[entry.user_id].append(entry)

    overviews = []
    for user in users:
        profile = user.profile
        entries = entries_by_user.get(user.id, [])
        start_date = profile.start_date if profile else None
        counts = lifecycle.aggregate_counts(lifecycle.build_week_rows(prompts, entries))

        overviews.append(
            UserOverview(
                **counts.model_dump(),
                id=user.id,
                email=(profile.email if profile else None) or user.email,
                preferred_name=profile.preferred_name if profile else None,
                start_date=start_date,
                current_week=current_week_or_none(start_date),
                email_paused=bool(profile and profile.email_paused),
                disabled=bool(profile and profile.disabled),
                last_activity=lifecycle.last_activity(entries),
            )
        )

    overviews = [o for o in overviews if matches_query(o, q)]
    active = sorted(
        (o for o in overviews if o.last_activity is not None),
        key=lambda o: o.last_activity,
        reverse=True,
    )
    return UsersOverviewResponse(
        result=active + [o for o in overviews if o.last_activity is None],
    )


async def load_user_weeks(
    db: AsyncSession, user_id: int
) -> tuple[User | None, Sequence[Entry], list]:
    """Load a user, their entries and their catalog rows."""
    user = await load_user(db, user_id)
    if user is None:
        return None, [], []

    prompts = await load_active_prompts(db)
    entries = await load_user_entries(db, user_id)
    start_date = user.profile.start_date if user.profile else None
    rows = lifecycle.build_catalog_rows(prompts, entries, start_date)
    return user, entries, rows


@router.get("/users/{user_id}", response_model=AdminUserDetail)
async def get_user_detail(
    user_id: int,
    current_admin: CurrentAdmin,  # noqa: ARG001 - Required for auth enforcement
    db: AsyncSession = Depends(get_db),
):
    """One user's profile and every week of their plan."""
    user, _entries, rows = await load_user_weeks(db, user_id)
    if user is None:
        return failure("User not found", 404)

    profile = user.profile
    start_date = profile.start_date if profile else None
    return AdminUserDetail(
        user_id=user.id,
        email=(profile.email if profile else None) or user.email,
        preferred_name=profile.preferred_name if profile else None,
        start_date=start_date,
        current_week=current_week_or_none(start_date),
        counts=lifecycle.aggregate_counts(rows),
        weeks=rows,
    )


@router.get("/users/{user_id}/export", response_model=UserExport)
async def export_user(
    user_id: int,
    current_admin: CurrentAdmin,  # noqa: ARG001 - Required for auth enforcement
    db: AsyncSession = Depends(get_db),
):
    """Downloadable JSON copy of one user's weeks and writing."""
    user, entries, rows = await load_user_weeks(db, user_id)
    if user is None:
        return failure("User not found", 404)

    by_week = lifecycle.index_entries_by_week(entries)
    profile = user.profile
    payload = UserExport(
        exported_at=datetime.now(UTC),
        user=ExportedUser(
            id=user.id,
            preferred_name=profile.preferred_name if profile else None,
            email=(profile.email if profile else None) or user.email,
            start_date=profile.start_date if profile else None,
        ),
        entries=[
            ExportedEntry(
                week=row.week,
                prompt_title=row.title,
                status=row.display_status,
                content=(by_week[row.week].content or "") if row.week in by_week else "",
                updated_at=row.updated_at,
            )
            for row in rows
        ],
    )
    return JSONResponse(
        content=payload.model_dump(mode="json"),
        headers={
            "Content-Disposition": f'attachment; filename="user-{user_id}-autobiography.json"'
        },
    )


def require_target_profile(user: User):
    if user.profile is None:
        raise ActionFailed("User has no profile", status_code=404)
    return user.profile


async def set_start_date(db: AsyncSession, user: User, body: AdminActionRequest, _email) -> Any:
    profile = require_target_profile(user)
    profile.start_date = body.start_date
    await db.flush()
    return {"start_date": body.start_date.isoformat() if body.start_date else None}


async def set_email_paused(db: AsyncSession, user: User, body: AdminActionRequest, _email) -> Any:
    profile = require_target_profile(user)
    profile.email_paused = bool(body.email_paused)
    await db.flush()
    return {"email_paused": profile.email_paused}


async def set_disabled(db: AsyncSession, user: User, body: AdminActionRequest, _email) -> Any:
    profile = require_target_profile(user)
    profile.disabled = bool(body.disabled)
    await db.flush()
    return {"disabled": profile.disabled}


async def reset_week(db: AsyncSession, user: User, body: AdminActionRequest, _email) -> Any:
    result = await db.execute(
        delete(Entry).where(Entry.user_id == user.id, Entry.week == body.week)
    )
    return {"week": body.week, "deleted": result.rowcount or 0}


async def reset_all(db: AsyncSession, user: User, _body: AdminActionRequest, _email) -> Any:
    result = await db.execute(delete(Entry).where(Entry.user_id == user.id))
    return {"deleted": result.rowcount or 0}


def recipient_of(user: User) -> str:
    email = user.email or (user.profile.email if user.profile else None)
    if not email:
        raise ActionFailed("User has no email", status_code=400)
    return email


async def send_magic_link(
    _db: AsyncSession, user: User, _body: AdminActionRequest, email_client: ResendClient
) -> Any:
    to = recipient_of(user)
    token = create_auth_link_token(user.id, MAGIC_LINK)
    link = f"{get_settings().app_url.rstrip('/')}/login?link_token={token}"
    subject, html = sign_in_link_email(link)
    await email_client.send_email(to, subject, html)
    return {"email": to}


async def send_password_reset(
    _db: AsyncSession, user: User, _body: AdminActionRequest, email_client: ResendClient
) -> Any:
    to = recipient_of(user)
    token = create_auth_link_token(user.id, RECOVERY)
    link = f"{get_settings().app_url.rstrip('/')}/reset-password?token={token}"
    subject, html = password_reset_email(link)
    await email_client.send_email(to, subject, html)
    return {"email": to}


ActionHandler = Callable[[AsyncSession, User, AdminActionRequest, Any], Awaitable[Any]]

ACTION_HANDLERS: dict[AdminAction, ActionHandler] = {
    AdminAction.SET_START_DATE: set_start_date,
    AdminAction.SET_EMAIL_PAUSED: set_email_paused,
    AdminAction.RESET_WEEK: reset_week,
    AdminAction.RESET_ALL: reset_all,
    AdminAction.SET_DISABLED: set_disabled,
    AdminAction.SEND_MAGIC_LINK: send_magic_link,
    AdminAction.SEND_PASSWORD_RESET: send_password_reset,
}

EMAIL_ACTIONS = {AdminAction.SEND_MAGIC_LINK, AdminAction.SEND_PASSWORD_RESET}


@router.post("/auth-actions", response_model=AdminActionResponse)
async def run_auth_action(
    current_admin: CurrentAdmin,
    body: AdminActionRequest,
    db: AsyncSession = Depends(get_db),
    email_client: ResendClient | None = Depends(get_email_client),
):
    """Perform one account action on a user.

    Returns {"ok": true, "result": ...} on success and
    {"ok": false, "error": ...} with a 4xx/5xx status otherwise.
    """
    try:
        if body.action in EMAIL_ACTIONS and email_client is None:
            return failure("Email is not configured (RESEND_API_KEY)", 500)

        target = await load_user(db, body.target_user_id)
        if target is None:
            return failure("User not found", 404)

        handler = ACTION_HANDLERS[body.action]
        try:
            result = await handler(db, target, body, email_client)
        except ActionFailed as e:
            return failure(str(e), e.status_code)
        except APIError as e:
            logger.warning("Admin action %s email failed: %s", body.action.value, e)
            return failure(f"Email failed: {e}", 502)
    finally:
        if email_client is not None:
            await email_client.close()

    logger.info(
        "Admin %s ran %s on user %s", current_admin.id, body.action.value, body.target_user_id
    )
    return AdminActionResponse(ok=True, result=result)
