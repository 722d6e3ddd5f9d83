"""
Module: delivery/client.py
Description: Signed webhook delivery with retries and cancellation.

Serializes a payload once, signs it once, and POSTs the identical bytes
and headers on every attempt until the receiver accepts it, rejects it
permanently, the attempt budget runs out, or the caller cancels.
"""

import asyncio
import contextlib
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional
from uuid import uuid4

import httpx
from pydantic import ValidationError
from tenacity import RetryError

from ..errors import (
    CancellationError,
    ClientError,
    DeliveryError,
    RetriesExhausted,
    SerializationError,
    SigningError,
)
from ..models.payload import DeliveryConfig, DeliveryResult, Payload, SignedEnvelope
from ..signing.signer import Signer
from ..utils.logger import get_logger
from .retry import build_retrying, classify_response, classify_transport_error

logger = get_logger(__name__)

USER_AGENT = "HookRelay/0.1"


@dataclass
class _SendProgress:
    """Mutable per-send counters shared with the retry loop."""

    attempts: int = 0
    last_status_code: Optional[int] = None


class DeliveryClient:
    """
    HTTP client for delivering signed webhooks.

    Handles delivery attempts with proper timeout, status classification
    and exponential backoff between retryable failures.
    """

    def __init__(self, config: DeliveryConfig, http_client: Optional[httpx.AsyncClient] = None):
        """
        Initialize delivery client.

        Args:
            config: Validated delivery configuration
            http_client: Optional shared AsyncClient; the caller keeps ownership

        Raises:
            SigningError: If the secret or scheme is invalid
        """
        self.config = config
        self.signer = Signer(config.secret.get_secret_value(), config.signature_scheme)
        self.timeout = httpx.Timeout(config.request_timeout, connect=config.request_timeout)
        self._http_client = http_client

        logger.info(
            "Delivery client initialized",
            target_url=config.target_url,
            signature_scheme=self.signer.scheme.name,
            max_retries=config.max_retries,
            timeout_seconds=config.request_timeout,
        )

    async def send(
        self,
        event: str,
        data: Any = None,
        deadline: Optional[float] = None,
        abort: Optional[asyncio.Event] = None,
    ) -> DeliveryResult:
        """
        Deliver an event with the given data.

        Args:
            event: Event name (e.g. 'order.created')
            data: JSON-compatible event data
            deadline: Seconds after which the send is cancelled
            abort: Event that cancels the send when set

        Returns:
            Terminal delivery result
        """
        try:
            payload = Payload.create(event, data)
        except ValidationError as e:
            logger.error("Webhook payload rejected", event_name=repr(event), error_count=e.error_count())
            return DeliveryResult(
                success=False,
                error=SerializationError(f"invalid payload for event {event!r}: {e.error_count()} error(s)"),
            )
        return await self.send_payload(payload, deadline=deadline, abort=abort)

    async def send_payload(
        self,
        payload: Payload,
        deadline: Optional[float] = None,
        abort: Optional[asyncio.Event] = None,
    ) -> DeliveryResult:
        """
        Deliver a prepared payload.

        The signing timestamp is taken at send time and may differ from
        payload.timestamp. If the calling task is cancelled, the delivery
        is cancelled too and CancelledError propagates.

        Args:
            payload: Payload to deliver
            deadline: Seconds after which the send is cancelled
            abort: Event that cancels the send when set

        Returns:
            Terminal delivery result
        """
        try:
            body = payload.to_json_bytes()
        except SerializationError as e:
            logger.error("Webhook payload serialization failed", event_name=payload.event, error=str(e))
            return DeliveryResult(success=False, error=e)

        try:
            envelope = self._seal(body)
        except SigningError as e:
            logger.error("Webhook signing failed", event_name=payload.event, error=str(e))
            return DeliveryResult(success=False, error=e)

        log = logger.bind(message_id=envelope.message_id, event_name=payload.event)
        log.info("Starting webhook delivery", target_url=self.config.target_url)

        progress = _SendProgress()
        delivery = asyncio.ensure_future(self._deliver_with_retries(envelope, progress, log))
        aborted = asyncio.ensure_future(abort.wait()) if abort is not None else None
        waiters = [delivery] if aborted is None else [delivery, aborted]

        try:
            done, _ = await asyncio.wait(waiters, timeout=deadline, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await self._cancel(delivery)
            raise
        finally:
            if aborted is not None:
                aborted.cancel()

        if delivery in done:
            return delivery.result()

        await self._cancel(delivery)
        reason = "send aborted" if abort is not None and abort.is_set() else f"deadline of {deadline}s exceeded"
        log.warning("Webhook delivery cancelled", reason=reason, attempts=progress.attempts)
        return DeliveryResult(
            success=False,
            status_code=progress.last_status_code,
            message_id=envelope.message_id,
            error=CancellationError(reason, status_code=progress.last_status_code),
            attempts=progress.attempts,
        )

    def send_sync(self, event: str, data: Any = None, deadline: Optional[float] = None) -> DeliveryResult:
        """
        Deliver an event from synchronous code.

        Runs its own event loop, so it must not be called from inside a
        running loop.
        """
        return asyncio.run(self.send(event, data, deadline=deadline))

    def _seal(self, body: bytes) -> SignedEnvelope:
        """Assign a message ID and signing time and sign the body once."""
        message_id = f"msg_{uuid4()}"
        timestamp = int(time.time())
        signature = self.signer.sign(message_id, timestamp, body)
        return SignedEnvelope(message_id=message_id, timestamp=timestamp, signature=signature, body=body)

    def _headers(self, envelope: SignedEnvelope) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        headers.update(self.signer.scheme.headers(envelope.message_id, envelope.timestamp, envelope.signature))
        return headers

    @contextlib.asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                yield client

    async def _deliver_with_retries(self, envelope: SignedEnvelope, progress: _SendProgress, log) -> DeliveryResult:
        """Run the retry loop and turn its outcome into a DeliveryResult."""
        headers = self._headers(envelope)
        started = time.monotonic()

        try:
            async with self._client() as client:
                async for attempt in build_retrying(self.config, log):
                    with attempt:
                        status_code = await self._attempt(client, envelope, headers, progress, log)
        except ClientError as e:
            log.warning(
                "Abandoning webhook delivery due to client error",
                status_code=e.status_code,
                attempts=progress.attempts,
            )
            return self._failure(envelope, e, progress)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            exhausted = RetriesExhausted(last_error, progress.attempts, status_code=progress.last_status_code)
            log.error(
                "Webhook delivery failed after all retries",
                attempts=progress.attempts,
                status_code=progress.last_status_code,
                error=str(last_error),
            )
            return self._failure(envelope, exhausted, progress)

        log.info(
            "Webhook delivered successfully",
            status_code=status_code,
            attempts=progress.attempts,
            total_duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        return DeliveryResult(
            success=True,
            status_code=status_code,
            message_id=envelope.message_id,
            attempts=progress.attempts,
        )

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        envelope: SignedEnvelope,
        headers: Dict[str, str],
        progress: _SendProgress,
        log,
    ) -> int:
        """POST the envelope once and classify the outcome."""
        progress.attempts += 1
        log.debug("Attempting webhook delivery", attempt=progress.attempts)

        try:
            response = await client.post(
                self.config.target_url,
                content=envelope.body,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TransportError as e:
            raise classify_transport_error(e) from e

        progress.last_status_code = response.status_code
        return classify_response(response)

    @staticmethod
    def _failure(envelope: SignedEnvelope, error: DeliveryError, progress: _SendProgress) -> DeliveryResult:
        return DeliveryResult(
            success=False,
            status_code=error.status_code,
            message_id=envelope.message_id,
            error=error,
            attempts=progress.attempts,
        )

    @staticmethod
    async def _cancel(task: "asyncio.Future[Any]") -> None:
        """Cancel a running delivery and wait for it to unwind."""
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
