"""
Module: response.py
Description: API response models for the HookRelay endpoints.

Defines response models for outgoing API calls. These models structure
the JSON responses returned by the receiver and trigger endpoints.

Key Components:
- WebhookAck: Receiver acknowledgement for a verified webhook
- TriggerResponse: Result of a sender-side trigger
- HealthResponse: Health check body

Dependencies: pydantic, typing
Author: HookRelay Team
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class WebhookAck(BaseModel):
    """
    Response returned by the receiver for an accepted webhook.

    Attributes:
        message: Human-readable status message
        event: Event name from the verified payload
        msg_id: Message ID from the signature headers (serialized as msgId)
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="Human-readable status message")
    event: str = Field(..., description="Event name")
    msg_id: str = Field(..., alias="msgId", description="Message ID")


class TriggerResponse(BaseModel):
    """Response returned after a trigger delivered its webhook."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(default="Webhook sent!", description="Human-readable status message")
    event: str = Field(..., description="Event name")
    msg_id: Optional[str] = Field(default=None, alias="msgId", description="Message ID")
    status_code: Optional[int] = Field(default=None, alias="statusCode", description="Receiver status")
    attempts: int = Field(default=0, ge=0, description="Delivery attempts made")


class HealthResponse(BaseModel):
    """Health check body."""

    status: str = Field(default="ok")
    version: Optional[str] = None
    environment: Optional[str] = None
