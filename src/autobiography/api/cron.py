"""Scheduled job endpoints, called by an external cron trigger."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from autobiography.database import get_db
from autobiography.schemas.admin import ReminderSummary
from autobiography.services.email import ResendClient, get_email_client
from autobiography.services.reminders import ReminderService
from autobiography.utils.security import verify_cron_secret

router = APIRouter(prefix="/cron", tags=["cron"])


@router.get("/send-weekly", response_model=ReminderSummary)
async def send_weekly(
    _: None = Depends(verify_cron_secret),
    db: AsyncSession = Depends(get_db),
    email_client: ResendClient | None = Depends(get_email_client),
):
    """Email every eligible writer the prompt for their current week.

    Requires ``Authorization: Bearer <CRON_SECRET>``. Paused accounts and
    accounts without an email or start date are skipped and counted.
    """
    if email_client is None:
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "Missing env var: RESEND_API_KEY"},
        )

    try:
        return await ReminderService(db, email_client).send_weekly()
    finally:
        await email_client.close()
