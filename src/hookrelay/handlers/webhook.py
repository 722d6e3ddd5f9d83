"""
Module: webhook.py
Description: Receiver endpoint for signed webhooks.

Verifies inbound webhooks and dispatches their payloads to the
registered event handlers.

Key Components:
- receive_webhook(): POST /webhook
- Verification failures mapped to 401 (headers, timestamp, signature) or 400 (body)
- Handler failures are contained by the dispatcher and never change the response

Dependencies: FastAPI, typing, verification, dispatch, utils
Author: HookRelay Team
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..dispatch.dispatcher import EventDispatcher
from ..errors import DuplicateMessageError, VerificationError
from ..models.response import WebhookAck
from ..utils.logger import get_logger
from ..utils.metrics import MetricsClient
from ..verification.engine import VerificationEngine
from .dependencies import get_dispatcher, get_metrics_client, get_verification_engine

router = APIRouter(tags=["webhooks"])
logger = get_logger(__name__)


@router.post(
    "/webhook",
    response_model=WebhookAck,
    responses={400: {"description": "Malformed body"}, 401: {"description": "Verification failed"}},
)
async def receive_webhook(
    request: Request,
    engine: VerificationEngine = Depends(get_verification_engine),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
    metrics_client: Optional[MetricsClient] = Depends(get_metrics_client),
):
    """
    Verify a webhook and dispatch it.

    Example:
        POST /webhook
        svix-id: msg_2b6f...
        svix-timestamp: 1705314600
        svix-signature: v1,K5oZ...
        {"data":{"amount":99.99,"order_id":"12345"},"event":"order.created","timestamp":"..."}

        Response (200):
        {"message": "Webhook verified and processed", "event": "order.created", "msgId": "msg_2b6f..."}
    """
    raw_body = await request.body()

    try:
        payload = engine.verify(request.headers, raw_body)
    except DuplicateMessageError as e:
        logger.info("Duplicate webhook acknowledged", message_id=e.message_id, event_name=e.event)
        if metrics_client is not None:
            metrics_client.webhook_duplicate(e.event)
        return WebhookAck(message=e.public_message, event=e.event, msg_id=e.message_id)
    except VerificationError as e:
        logger.warning(
            "Webhook rejected",
            reason=type(e).__name__,
            detail=str(e),
            status_code=e.http_status,
            path=request.url.path,
        )
        if metrics_client is not None:
            metrics_client.webhook_rejected(type(e).__name__)
        return JSONResponse(status_code=e.http_status, content={"error": e.public_message})

    message_id = request.headers.get(engine.scheme.id_header)
    logger.info("Verified webhook", event_name=payload.event, message_id=message_id)

    errors = await dispatcher.dispatch(payload)
    if metrics_client is not None:
        metrics_client.webhook_verified(payload.event, handler_errors=len(errors))

    return WebhookAck(message="Webhook verified and processed", event=payload.event, msg_id=message_id)
