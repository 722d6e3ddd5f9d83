"""
HookRelay: signed webhook delivery and verification.

Sending side: DeliveryClient signs a payload once and delivers it with
retries and exponential backoff. Receiving side: VerificationEngine
checks headers, freshness and signature, and EventDispatcher routes the
verified payload to application handlers.
"""

from .delivery import DeliveryClient
from .dispatch import EventDispatcher
from .models import DeliveryConfig, DeliveryResult, Payload
from .signing import Signer
from .verification import VerificationEngine

__version__ = "0.1.0"

__all__ = [
    "DeliveryClient",
    "DeliveryConfig",
    "DeliveryResult",
    "EventDispatcher",
    "Payload",
    "Signer",
    "VerificationEngine",
]
