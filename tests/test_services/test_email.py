"""Tests for the Resend email client and message templates."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from autobiography.services.base import APIError, RateLimitError
from autobiography.services.email import (
    ResendClient,
    get_email_client,
    password_reset_email,
    sign_in_link_email,
    weekly_reminder_email,
)


@pytest.fixture
def mock_settings():
    """Mock settings with test API key."""
    with patch("autobiography.services.email.get_settings") as mock:
        mock.return_value.resend_api_key = "re_test_key"
        mock.return_value.resend_base_url = "https://api.resend.com"
        mock.return_value.resend_from_email = "Autobiography <hello@autobiography.test>"
        yield mock


@pytest.fixture
def resend_client(mock_settings) -> ResendClient:  # noqa: ARG001
    """Create a Resend client for testing."""
    return ResendClient()


class TestResendClientInit:
    """Tests for Resend client initialization."""

    def test_init_from_settings(self, resend_client: ResendClient) -> None:
        assert resend_client._api_key == "re_test_key"
        assert resend_client.base_url == "https://api.resend.com"
        assert resend_client.from_email == "Autobiography <hello@autobiography.test>"

    def test_init_with_overrides(self, mock_settings) -> None:  # noqa: ARG002
        client = ResendClient(api_key="custom", from_email="me@x.test", base_url="https://x.test/")
        assert client._api_key == "custom"
        assert client.from_email == "me@x.test"
        assert client.base_url == "https://x.test"

    def test_init_without_api_key_raises(self) -> None:
        with patch("autobiography.services.email.get_settings") as mock:
            mock.return_value.resend_api_key = ""
            mock.return_value.resend_base_url = "https://api.resend.com"
            mock.return_value.resend_from_email = "a@b.test"
            with pytest.raises(ValueError, match="Resend API key is required"):
                ResendClient()

    def test_default_headers(self, resend_client: ResendClient) -> None:
        headers = resend_client.default_headers
        assert headers["Authorization"] == "Bearer re_test_key"
        assert headers["Accept"] == "application/json"


class TestSendEmail:
    """Tests for sending email."""

    async def test_send_email_success(self, resend_client: ResendClient) -> None:
        mock_response = httpx.Response(200, json={"id": "msg_123"})

        with patch.object(resend_client, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.request.return_value = mock_response
            mock_get_client.return_value = mock_client

            result = await resend_client.send_email("writer@example.com", "Hi", "<p>Hi</p>")

            assert result.id == "msg_123"
            call_args = mock_client.request.call_args
            assert call_args.kwargs["method"] == "POST"
            assert call_args.kwargs["url"] == "emails"
            body = call_args.kwargs["json"]
            assert body["from"] == "Autobiography <hello@autobiography.test>"
            assert body["to"] == ["writer@example.com"]
            assert body["subject"] == "Hi"

    async def test_send_email_without_id_raises(self, resend_client: ResendClient) -> None:
        mock_response = httpx.Response(200, json={})

        with patch.object(resend_client, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.request.return_value = mock_response
            mock_get_client.return_value = mock_client

            with pytest.raises(APIError, match="did not return a message id"):
                await resend_client.send_email("writer@example.com", "Hi", "<p>Hi</p>")

    async def test_send_email_rejected(self, resend_client: ResendClient) -> None:
        mock_response = httpx.Response(422, json={"message": "Invalid `to` field"})

        with patch.object(resend_client, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.request.return_value = mock_response
            mock_get_client.return_value = mock_client

            with pytest.raises(APIError) as exc_info:
                await resend_client.send_email("bad", "Hi", "<p>Hi</p>")

            assert exc_info.value.status_code == 422

    async def test_send_email_rate_limited(self, resend_client: ResendClient) -> None:
        mock_response = httpx.Response(429, headers={"Retry-After": "2"})

        with patch.object(resend_client, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.request.return_value = mock_response
            mock_get_client.return_value = mock_client

            with pytest.raises(RateLimitError) as exc_info:
                await resend_client.send_email("writer@example.com", "Hi", "<p>Hi</p>")

            assert exc_info.value.retry_after == 2

    async def test_send_email_timeout(self, resend_client: ResendClient) -> None:
        with patch.object(resend_client, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.request.side_effect = httpx.TimeoutException("timed out")
            mock_get_client.return_value = mock_client

            with pytest.raises(APIError, match="timed out"):
                await resend_client.send_email("writer@example.com", "Hi", "<p>Hi</p>")


class TestGetEmailClient:
    """Tests for the client factory."""

    async def test_returns_none_without_key(self) -> None:
        with patch("autobiography.services.email.get_settings") as mock:
            mock.return_value.resend_api_key = ""
            assert await get_email_client() is None

    async def test_returns_client_with_key(self, mock_settings) -> None:  # noqa: ARG002
        client = await get_email_client()
        assert isinstance(client, ResendClient)


class TestTemplates:
    """Tests for email templates."""

    def test_weekly_reminder(self) -> None:
        subject, html = weekly_reminder_email(
            week=3,
            prompt_title="Your first home",
            question="What did the kitchen smell like?",
            link="https://autobiography.test/week?week=3",
            preferred_name="Sam",
        )
        assert subject == "Week 3: Your first home"
        assert "Hello Sam," in html
        assert "What did the kitchen smell like?" in html
        assert 'href="https://autobiography.test/week?week=3"' in html

    def test_weekly_reminder_without_title_or_name(self) -> None:
        subject, html = weekly_reminder_email(4, None, None, "https://x.test")
        assert subject == "Week 4: Your autobiography prompt"
        assert "Hello," in html

    def test_weekly_reminder_escapes_html(self) -> None:
        _subject, html = weekly_reminder_email(1, "T", "<b>bold</b>", "https://x.test", "<Al>")
        assert "&lt;b&gt;bold&lt;/b&gt;" in html
        assert "&lt;Al&gt;" in html

    def test_sign_in_link(self) -> None:
        subject, html = sign_in_link_email("https://x.test/login?link_token=abc")
        assert "sign-in" in subject
        assert "link_token=abc" in html

    def test_password_reset(self) -> None:
        subject, html = password_reset_email("https://x.test/reset-password?token=abc")
        assert "Reset" in subject
        assert "token=abc" in html
