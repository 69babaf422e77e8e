"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App settings
    app_name: str = "Autobiography API"
    debug: bool = False
    secret_key: str  # Required, no default
    app_url: str = "http://localhost:3000"

    # Database
    database_url: str = "sqlite+aiosqlite:///./autobiography.db"

    # Resend (transactional email)
    resend_api_key: str = ""
    resend_base_url: str = "https://api.resend.com"
    resend_from_email: str = "Autobiography <noreply@example.com>"

    # Scheduled jobs
    cron_secret: str = ""

    # JWT Authentication
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 30
    auth_link_expire_minutes: int = 60

    # Write view
    autosave_interval_seconds: float = 30.0

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str, info) -> str:
        """Validate that secret_key is secure."""
        if not v:
            raise ValueError("SECRET_KEY is required")

        # In production mode, ensure secret key is strong
        debug = info.data.get("debug", False)
        if not debug:
            if len(v) < 32:
                raise ValueError("SECRET_KEY must be at least 32 characters in production mode")
            if v in ("change-me-in-production", "secret", "password", "changeme"):
                raise ValueError("SECRET_KEY must not be a common weak value")

        return v

    def validate_runtime_config(self) -> list[str]:
        """Validate runtime configuration and return warnings."""
        warnings = []

        if not self.resend_api_key:
            warnings.append("RESEND_API_KEY is not set - reminder and sign-in emails will fail")

        if "example.com" in self.resend_from_email:
            warnings.append(
                "RESEND_FROM_EMAIL contains example domain - "
                "please set a verified sender address"
            )

        if not self.cron_secret:
            warnings.append("CRON_SECRET is not set - the weekly email job will reject all calls")

        # Warn about debug mode in production
        if self.debug:
            warnings.append("DEBUG mode is enabled - should be disabled in production")

        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
