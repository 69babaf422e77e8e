"""SQLAlchemy ORM models."""

from autobiography.models.entry import Entry
from autobiography.models.profile import Profile
from autobiography.models.prompt import Prompt
from autobiography.models.user import User

__all__ = [
    "Entry",
    "Profile",
    "Prompt",
    "User",
]
