"""
Module: trigger.py
Description: Sender-side endpoints that deliver webhooks on demand.

Key Components:
- trigger_demo(): POST /trigger sends a sample order.created event
- trigger_event(): POST /trigger/{event} sends the request body as event data

Dependencies: FastAPI, typing, delivery, utils
Author: HookRelay Team
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi import status as status_codes
from fastapi.responses import JSONResponse

from ..delivery.client import DeliveryClient
from ..models.response import TriggerResponse
from ..utils.logger import get_logger
from ..utils.metrics import MetricsClient
from .dependencies import get_delivery_client, get_metrics_client

router = APIRouter(prefix="/trigger", tags=["trigger"])
logger = get_logger(__name__)

DEMO_EVENT = "order.created"
DEMO_DATA = {"order_id": "12345", "amount": 99.99}


async def _deliver(
    client: DeliveryClient,
    event: str,
    data: Dict[str, Any],
    metrics_client: Optional[MetricsClient],
):
    result = await client.send(event, data)

    if metrics_client is not None:
        metrics_client.delivery_completed(event, result.success, result.attempts)

    if not result.success:
        logger.warning(
            "Triggered webhook not delivered",
            event_name=event,
            message_id=result.message_id,
            error_type=type(result.error).__name__,
        )
        return JSONResponse(
            status_code=status_codes.HTTP_502_BAD_GATEWAY,
            content={
                "error": str(result.error),
                "event": event,
                "msgId": result.message_id,
                "statusCode": result.status_code,
                "attempts": result.attempts,
            },
        )

    return TriggerResponse(
        event=event,
        msg_id=result.message_id,
        status_code=result.status_code,
        attempts=result.attempts,
    )


@router.post("", response_model=TriggerResponse)
async def trigger_demo(
    client: DeliveryClient = Depends(get_delivery_client),
    metrics_client: Optional[MetricsClient] = Depends(get_metrics_client),
):
    """Send the sample order.created webhook."""
    return await _deliver(client, DEMO_EVENT, DEMO_DATA, metrics_client)


@router.post("/{event}", response_model=TriggerResponse)
async def trigger_event(
    event: str,
    request: Request,
    client: DeliveryClient = Depends(get_delivery_client),
    metrics_client: Optional[MetricsClient] = Depends(get_metrics_client),
):
    """
    Send a webhook for event with the JSON request body as its data.

    Raises:
        HTTPException: 400 if the body is not a JSON object
    """
    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(
            status_code=status_codes.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON payload"
        )

    if not isinstance(data, dict):
        raise HTTPException(
            status_code=status_codes.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON payload"
        )

    return await _deliver(client, event, data, metrics_client)
