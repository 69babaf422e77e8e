"""Business logic and external API clients."""

from autobiography.services.base import (
    APIError,
    BaseAPIClient,
    NotFoundError,
    RateLimitError,
)
from autobiography.services.drafts import AutosaveTimer, Draft
from autobiography.services.email import ResendClient, get_email_client
from autobiography.services.lifecycle import DuplicateEntryError
from autobiography.services.reminders import ReminderService

__all__ = [
    "APIError",
    "AutosaveTimer",
    "BaseAPIClient",
    "Draft",
    "DuplicateEntryError",
    "NotFoundError",
    "RateLimitError",
    "ReminderService",
    "ResendClient",
    "get_email_client",
]
