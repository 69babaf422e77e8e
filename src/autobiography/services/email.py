"""Resend transactional email client and message templates."""

from html import escape

from autobiography.config import get_settings
from autobiography.schemas.email import EmailMessage, EmailSendResult
from autobiography.services.base import APIError, BaseAPIClient


class ResendClient(BaseAPIClient):
    """Client for the Resend email API.

    Uses Bearer token authentication. Only sending is supported.
    """

    def __init__(
        self,
        api_key: str | None = None,
        from_email: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the Resend client.

        Args:
            api_key: Resend API key. If not provided, uses settings.
            from_email: Sender address. If not provided, uses settings.
            base_url: Resend base URL. If not provided, uses settings.
            timeout: Request timeout in seconds.
        """
        settings = get_settings()
        self._api_key = api_key or settings.resend_api_key
        self.from_email = from_email or settings.resend_from_email
        base = base_url or settings.resend_base_url

        if not self._api_key:
            raise ValueError("Resend API key is required")

        super().__init__(base_url=base, timeout=timeout)

    @property
    def default_headers(self) -> dict[str, str]:
        """Return default headers including Bearer token authentication."""
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }

    async def send_email(self, to: str, subject: str, html: str) -> EmailSendResult:
        """Send one HTML email.

        Raises:
            APIError: If Resend rejects the message or returns no ID.
        """
        message = EmailMessage(sender=self.from_email, to=[to], subject=subject, html=html)
        data = await self.post("/emails", json=message.model_dump(by_alias=True))
        result = EmailSendResult.model_validate(data)
        if not result.id:
            raise APIError("Resend did not return a message id")
        return result


async def get_email_client() -> ResendClient | None:
    """Factory function to create a Resend client.

    Returns None when no API key is configured, so endpoints that only
    sometimes send email still work. Can be used as a FastAPI dependency.
    """
    if not get_settings().resend_api_key:
        return None
    return ResendClient()


def _wrap(body: str) -> str:
    return f'<div style="font-family: Arial, sans-serif; line-height:1.5">{body}</div>'


def weekly_reminder_email(
    week: int,
    prompt_title: str | None,
    question: str | None,
    link: str,
    preferred_name: str | None = None,
) -> tuple[str, str]:
    """Subject and HTML body of the weekly reminder."""
    greeting = f"Hello {escape(preferred_name)}," if preferred_name else "Hello,"
    subject = f"Week {week}: {prompt_title or 'Your autobiography prompt'}"
    html = _wrap(
        f"<p>{greeting}</p>"
        f"<p><strong>Week {week}</strong></p>"
        f"<p>{escape(question or '')}</p>"
        f'<p><a href="{escape(link)}">Open this week\'s question</a></p>'
        '<p style="opacity:0.7;font-size:12px">'
        "If you did not request these emails, you can ignore this message.</p>"
    )
    return subject, html


def sign_in_link_email(link: str) -> tuple[str, str]:
    """Subject and HTML body of an administrator-sent sign-in link."""
    html = _wrap(
        "<p>Here is your secure sign-in link.</p>"
        f'<p><a href="{escape(link)}">Sign in</a></p>'
        "<p>If you did not request this, you can ignore this email.</p>"
    )
    return "Your autobiography sign-in link", html


def password_reset_email(link: str) -> tuple[str, str]:
    """Subject and HTML body of a password reset link."""
    html = _wrap(
        "<p>Use the link below to reset your password.</p>"
        f'<p><a href="{escape(link)}">Reset password</a></p>'
        "<p>If you did not request this, you can ignore this email.</p>"
    )
    return "Reset your autobiography password", html
