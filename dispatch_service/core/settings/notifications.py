"""Notification dispatch and retry settings."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotificationSettings(BaseSettings):
    """Delivery pipeline, retry sweep and simulated transport settings.

    Environment variables use NOTIFY_ prefix.
    Example: NOTIFY_RETRY_INTERVAL_SECONDS=30, NOTIFY_MAX_RETRIES=5
    """

    # ──────────────────────────────────────────────────────────────
    # Retry sweep
    # ──────────────────────────────────────────────────────────────

    sweeper_enabled: bool = Field(
        default=True,
        description="Run the periodic retry sweep while the application is up",
    )

    retry_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        le=86400,
        description="Fixed period between retry sweeps in seconds",
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=100,
        description="Failed notifications at or above this retry count are never retried again",
    )

    # ──────────────────────────────────────────────────────────────
    # Simulated transports
    # ──────────────────────────────────────────────────────────────

    email_latency_seconds: float = Field(
        default=0.8,
        ge=0,
        le=60,
        description="Simulated round-trip latency of the email transport",
    )

    email_success_rate: float = Field(
        default=0.90,
        ge=0,
        le=1,
        description="Probability that a single email attempt succeeds",
    )

    sms_latency_seconds: float = Field(
        default=0.6,
        ge=0,
        le=60,
        description="Simulated round-trip latency of the SMS transport",
    )

    sms_success_rate: float = Field(
        default=0.85,
        ge=0,
        le=1,
        description="Probability that a single SMS attempt succeeds",
    )

    # ──────────────────────────────────────────────────────────────
    # Listing
    # ──────────────────────────────────────────────────────────────

    default_page_limit: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Page size used when a listing request omits limit",
    )

    max_page_limit: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Largest page size a listing request may ask for",
    )

    @model_validator(mode="after")
    def validate_page_limits(self) -> NotificationSettings:
        """Ensure the default page size fits under the maximum."""
        if self.default_page_limit > self.max_page_limit:
            msg = "default_page_limit must not exceed max_page_limit"
            raise ValueError(msg)
        return self

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
