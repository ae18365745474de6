"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

MAX_VAPID_TOKEN_TTL_SECONDS = 24 * 60 * 60


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./stock_notifications.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_origin: str = Field(
        default="http://localhost:3000",
        description="Public origin of the storefront, used to build product URLs",
        min_length=1,
    )
    store_name: str = Field(
        default="Supermom Store",
        description="Title shown on every back-in-stock notification",
        min_length=1,
    )
    cors_origins: str = Field(
        default="*", description="Comma separated list of allowed CORS origins"
    )
    log_level: str = Field(default="INFO", description="Root log level")

    push_enabled: bool = Field(
        default=True,
        description="Turns the push dispatch path on or off without code changes",
    )
    vapid_public_key: str | None = Field(
        default=None,
        description="Application server public key (base64url, uncompressed P-256 point)",
    )
    vapid_private_key: str | None = Field(
        default=None,
        description="Application server private key (base64url scalar or PEM)",
    )
    vapid_subject: str = Field(
        default="mailto:admin@example.com",
        description="Contact URI sent as the ``sub`` claim of VAPID tokens",
    )
    vapid_token_ttl_seconds: int = Field(
        default=12 * 60 * 60,
        description="Lifetime of VAPID tokens, capped at 24 hours",
        gt=0,
        le=MAX_VAPID_TOKEN_TTL_SECONDS,
    )
    push_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        description="How long the push service should hold an undelivered message",
        ge=0,
    )
    push_urgency: str = Field(default="normal", description="Web Push ``Urgency`` header")
    push_max_workers: int = Field(
        default=10, description="Concurrent deliveries per dispatch cycle", gt=0
    )
    push_max_attempts: int = Field(
        default=3, description="Delivery attempts per request and cycle", gt=0
    )
    push_backoff_seconds: float = Field(
        default=0.5, description="Delay before the first retry", ge=0
    )
    push_backoff_factor: float = Field(
        default=2.0, description="Multiplier applied to the delay after each retry", ge=1
    )
    push_timeout_seconds: float = Field(
        default=5.0, description="Timeout for a single delivery attempt", gt=0
    )

    @model_validator(mode="after")
    def _validate_vapid_settings(self) -> "Settings":
        if bool(self.vapid_public_key) ^ bool(self.vapid_private_key):
            raise ValueError(
                "VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY must both be provided to enable push"
            )
        if not self.vapid_subject.startswith(("mailto:", "https:")):
            raise ValueError("VAPID_SUBJECT must be a mailto: or https: URI")
        return self

    def cors_origin_list(self) -> list[str]:
        """Return the configured CORS origins as a list."""

        raw = (self.cors_origins or "").strip()
        if not raw or raw == "*":
            return ["*"]
        return [origin.strip() for origin in raw.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = [
    "MAX_VAPID_TOKEN_TTL_SECONDS",
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
