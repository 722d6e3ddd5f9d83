"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Configures all application settings from environment variables with
validation and defaults. Supports .env files for local development.
The webhook secret is required, so building the settings fails fast
when it is not supplied.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="HookRelay", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")
    stage: str = Field(default="dev", description="Deployment stage")
    port: int = Field(default=4000, ge=1, le=65535, description="Listen port")

    # Signing settings
    webhook_secret: SecretStr = Field(
        ...,
        description="Shared secret used to sign and verify webhooks"
    )
    signature_scheme: Literal["svix", "simple"] = Field(
        default="svix",
        description="Header/signature scheme, identical on both sides"
    )

    # Delivery settings
    webhook_target_url: Optional[str] = Field(
        default=None,
        description="Receiver URL for outbound webhooks"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Total delivery attempts, first attempt included"
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="HTTP timeout in seconds for each attempt"
    )
    initial_backoff_interval: float = Field(
        default=1.0,
        gt=0,
        description="Delay in seconds before the first retry"
    )
    max_backoff_interval: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound in seconds for a single backoff delay"
    )
    backoff_jitter: float = Field(
        default=0.0,
        ge=0,
        description="Maximum random jitter in seconds added to each backoff"
    )

    # Verification settings
    timestamp_tolerance: int = Field(
        default=300,
        ge=1,
        description="Accepted clock skew in seconds for inbound timestamps"
    )
    replay_protection: bool = Field(
        default=False,
        description="Reject already-seen message IDs inside the tolerance window"
    )
    parallel_handlers: bool = Field(
        default=False,
        description="Run event handlers concurrently instead of in order"
    )

    # Metrics settings
    metrics_enabled: bool = Field(default=False, description="Publish CloudWatch metrics")
    metrics_namespace: str = Field(default="HookRelay", description="CloudWatch namespace")
    aws_region: str = Field(default="us-east-1", description="AWS region")

    @field_validator('webhook_secret')
    @classmethod
    def validate_secret(cls, v: SecretStr) -> SecretStr:
        """Reject empty or whitespace-only secrets."""
        if not v.get_secret_value().strip():
            raise ValueError("webhook_secret must be a non-empty string")
        return v

    @field_validator('webhook_target_url')
    @classmethod
    def validate_target_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate the target URL is HTTP(S) when given."""
        if v is not None and not v.startswith(('http://', 'https://')):
            raise ValueError("webhook_target_url must be a valid HTTP/HTTPS URL")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()
