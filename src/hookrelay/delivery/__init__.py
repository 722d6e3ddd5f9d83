"""
Package: delivery
Description: Outbound webhook delivery for HookRelay.

Provides the signing DeliveryClient and the retry/backoff policy
used for handling transient delivery failures.
"""

from .client import DeliveryClient

__all__ = ["DeliveryClient"]
