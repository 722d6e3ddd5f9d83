"""
Module: dependencies.py
Description: FastAPI dependency providers for the HookRelay routes.

Builds the verification engine, dispatcher, delivery client and metrics
client from settings. The engine and dispatcher are process-wide so that
registered handlers and the replay cache are shared by all requests.
"""

from functools import lru_cache
from typing import Optional

from fastapi import HTTPException
from fastapi import status as status_codes

from ..config.settings import get_settings
from ..delivery.client import DeliveryClient
from ..dispatch.dispatcher import EventDispatcher
from ..models.payload import DeliveryConfig
from ..utils.logger import get_logger
from ..utils.metrics import MetricsClient
from ..verification.engine import VerificationEngine

logger = get_logger(__name__)


@lru_cache()
def get_verification_engine() -> VerificationEngine:
    """Dependency to get the shared verification engine."""
    return VerificationEngine.from_settings(get_settings())


@lru_cache()
def get_dispatcher() -> EventDispatcher:
    """Dependency to get the shared event dispatcher."""
    return EventDispatcher(parallel=get_settings().parallel_handlers)


def get_delivery_client() -> DeliveryClient:
    """
    Dependency to get a delivery client for the configured receiver.

    Raises:
        HTTPException: 503 if no target URL is configured
    """
    settings = get_settings()
    if not settings.webhook_target_url:
        logger.error("Webhook target URL is not configured")
        raise HTTPException(
            status_code=status_codes.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Webhook target URL is not configured"
        )
    return DeliveryClient(DeliveryConfig.from_settings(settings))


def get_metrics_client() -> Optional[MetricsClient]:
    """
    Dependency to get CloudWatch metrics client.

    Returns None when metrics are disabled.
    """
    settings = get_settings()
    if not settings.metrics_enabled:
        return None
    return MetricsClient(namespace=settings.metrics_namespace, region_name=settings.aws_region)
