"""
Module: models
Description: Package initialization for HookRelay data models.

This package contains the data models used on both sides of a webhook:
- Payload: Event payload with canonical JSON serialization
- DeliveryConfig: Validated sender configuration
- SignedEnvelope / DeliveryResult: Per-send values
- WebhookAck / TriggerResponse / HealthResponse: API responses
"""

from .payload import DeliveryConfig, DeliveryResult, Payload, SignedEnvelope
from .response import HealthResponse, TriggerResponse, WebhookAck

__all__ = [
    "Payload",
    "DeliveryConfig",
    "SignedEnvelope",
    "DeliveryResult",
    "WebhookAck",
    "TriggerResponse",
    "HealthResponse",
]
