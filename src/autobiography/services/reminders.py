"""Weekly reminder email run."""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autobiography.config import get_settings
from autobiography.models.profile import Profile
from autobiography.models.prompt import Prompt
from autobiography.schemas.admin import ReminderSummary
from autobiography.services.base import APIError
from autobiography.services.email import ResendClient, weekly_reminder_email
from autobiography.services.lifecycle import current_week

logger = logging.getLogger(__name__)


class ReminderService:
    """Sends each eligible writer the prompt for their current week."""

    def __init__(self, db: AsyncSession, email_client: ResendClient) -> None:
        self.db = db
        self.email_client = email_client
        self.app_url = get_settings().app_url.rstrip("/")

    async def get_candidate_profiles(self) -> list[Profile]:
        """Profiles of accounts that are not disabled."""
        result = await self.db.execute(select(Profile).where(Profile.disabled.is_(False)))
        return list(result.scalars().all())

    async def get_prompts_by_week(self) -> dict[int, Prompt]:
        """Active prompts keyed by week."""
        result = await self.db.execute(select(Prompt).where(Prompt.active.is_(True)))
        return {p.week: p for p in result.scalars().all()}

    async def send_weekly(self, now: datetime | None = None) -> ReminderSummary:
        """Send one reminder per eligible profile.

        Profiles without an email, with emails paused, or without a start
        date are skipped and counted. Failed sends are logged and counted,
        never retried.
        """
        now = now or datetime.now(UTC)
        summary = ReminderSummary()

        profiles = await self.get_candidate_profiles()
        prompts = await self.get_prompts_by_week()

        for profile in profiles:
            if not profile.email:
                summary.skipped_no_email += 1
                continue
            if profile.email_paused:
                summary.skipped_paused += 1
                continue
            if profile.start_date is None:
                summary.skipped_no_start += 1
                continue

            week = current_week(profile.start_date, now)
            prompt = prompts.get(week)
            if prompt is None:
                summary.skipped_no_prompt += 1
                continue

            question = prompt.questions[0] if prompt.questions else prompt.coaching
            subject, html = weekly_reminder_email(
                week=week,
                prompt_title=prompt.title,
                question=question,
                link=f"{self.app_url}/week?week={week}",
                preferred_name=profile.preferred_name,
            )

            try:
                await self.email_client.send_email(profile.email, subject, html)
            except APIError as e:
                logger.warning("Reminder to user %s failed: %s", profile.user_id, e)
                summary.failed += 1
                continue

            summary.sent += 1

        logger.info(
            "Weekly reminders: sent=%d paused=%d no_start=%d no_email=%d no_prompt=%d failed=%d",
            summary.sent,
            summary.skipped_paused,
            summary.skipped_no_start,
            summary.skipped_no_email,
            summary.skipped_no_prompt,
            summary.failed,
        )
        return summary
