"""Profile API endpoints for the signed-in writer."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from autobiography.database import get_db
from autobiography.models.profile import Profile
from autobiography.schemas.profile import ProfileResponse, ProfileUpdate
from autobiography.utils.security import CurrentUser

router = APIRouter(prefix="/profile", tags=["profile"])


def require_profile(user) -> Profile:
    """Return the user's profile or fail with 404."""
    if user.profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return user.profile


@router.get("", response_model=ProfileResponse)
async def get_profile(current_user: CurrentUser) -> ProfileResponse:
    """Get the current writer's profile, schedule and display preferences."""
    return ProfileResponse.model_validate(require_profile(current_user))


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    current_user: CurrentUser,
    profile_data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """Update name, reminder day and display preferences.

    The start date and account flags are administrator-only.
    """
    profile = require_profile(current_user)

    if profile_data.preferred_name is not None:
        profile.preferred_name = profile_data.preferred_name.strip() or None
    if profile_data.preferred_email_day is not None:
        profile.preferred_email_day = profile_data.preferred_email_day
    if profile_data.ui_text_size is not None:
        profile.ui_text_size = profile_data.ui_text_size
    if profile_data.ui_contrast is not None:
        profile.ui_contrast = profile_data.ui_contrast

    await db.flush()

    return ProfileResponse.model_validate(profile)
