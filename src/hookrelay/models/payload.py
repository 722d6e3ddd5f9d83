"""
Module: payload.py
Description: Webhook payload and delivery data models.

Defines the immutable Payload that travels between sender and receiver,
the DeliveryConfig owned by a DeliveryClient, and the envelope/result
values produced by one logical send.

Key Components:
- Payload: {event, timestamp, data}, canonical JSON serialization
- DeliveryConfig: validated, frozen delivery configuration
- SignedEnvelope: message ID, signing timestamp, signature, exact body bytes
- DeliveryResult: terminal outcome returned to the caller

Dependencies: pydantic, dataclasses, datetime, json
Author: HookRelay Team
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_core import PydanticSerializationError

from ..errors import MalformedBodyError, SerializationError, WebhookError


class Payload(BaseModel):
    """
    Webhook payload delivered to subscribers.

    Attributes:
        event: Dotted event identifier (e.g. 'order.created')
        timestamp: When the event happened (UTC)
        data: Arbitrary JSON-compatible event data
    """

    model_config = ConfigDict(frozen=True)

    event: str = Field(..., min_length=1, description="Event identifier")
    timestamp: datetime = Field(..., description="Event timestamp")
    data: Any = Field(default=None, description="Event data")

    @field_validator('timestamp')
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC and normalize aware ones to UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @classmethod
    def create(cls, event: str, data: Any = None) -> "Payload":
        """Build a payload stamped with the current time."""
        return cls(event=event, timestamp=datetime.now(timezone.utc), data=data)

    def to_json_bytes(self) -> bytes:
        """
        Serialize to canonical JSON.

        Keys are sorted, separators carry no whitespace, and NaN/Infinity
        are refused so that the output is valid JSON for every receiver.

        Raises:
            SerializationError: If data holds values JSON cannot represent
        """
        try:
            document = self.model_dump(mode="json")
            return json.dumps(
                document,
                sort_keys=True,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            ).encode("utf-8")
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise SerializationError(f"payload for event {self.event!r} is not JSON serializable: {e}") from e

    @classmethod
    def from_json_bytes(cls, body: bytes) -> "Payload":
        """
        Parse a received body.

        Raises:
            MalformedBodyError: If body is not JSON of the payload shape
        """
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise MalformedBodyError(f"body does not match payload shape: {e.error_count()} error(s)") from e


class DeliveryConfig(BaseModel):
    """
    Configuration for one DeliveryClient.

    Frozen after construction; defaults are applied here and nowhere else.
    """

    model_config = ConfigDict(frozen=True)

    target_url: str = Field(..., description="Receiver URL")
    secret: SecretStr = Field(..., description="Shared signing secret")
    max_retries: int = Field(default=3, ge=1, description="Total attempts, first included")
    request_timeout: float = Field(default=10.0, gt=0, description="Per-attempt timeout (seconds)")
    max_backoff_interval: float = Field(default=30.0, gt=0, description="Backoff cap (seconds)")
    initial_backoff_interval: float = Field(default=1.0, gt=0, description="First backoff (seconds)")
    backoff_jitter: float = Field(default=0.0, ge=0, description="Max random jitter (seconds)")
    signature_scheme: str = Field(default="svix", description="Signing scheme name")

    @field_validator('target_url')
    @classmethod
    def validate_target_url(cls, v: str) -> str:
        if not v or not v.startswith(('http://', 'https://')):
            raise ValueError("target_url must be a valid HTTP/HTTPS URL")
        return v

    @field_validator('secret')
    @classmethod
    def validate_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("secret is required")
        return v

    @classmethod
    def from_settings(cls, settings) -> "DeliveryConfig":
        """Build a config from application Settings."""
        if not settings.webhook_target_url:
            raise ValueError("webhook_target_url is not configured")
        return cls(
            target_url=settings.webhook_target_url,
            secret=settings.webhook_secret,
            max_retries=settings.max_retries,
            request_timeout=settings.request_timeout,
            max_backoff_interval=settings.max_backoff_interval,
            initial_backoff_interval=settings.initial_backoff_interval,
            backoff_jitter=settings.backoff_jitter,
            signature_scheme=settings.signature_scheme,
        )


@dataclass(frozen=True)
class SignedEnvelope:
    """Signed bytes of one logical send, reused unchanged by every retry."""

    message_id: str
    timestamp: int
    signature: str
    body: bytes


@dataclass(frozen=True)
class DeliveryResult:
    """Terminal result of a send."""

    success: bool
    status_code: Optional[int] = None
    message_id: Optional[str] = None
    error: Optional[WebhookError] = None
    attempts: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "success": self.success,
            "status_code": self.status_code,
            "message_id": self.message_id,
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "attempts": self.attempts,
        }
