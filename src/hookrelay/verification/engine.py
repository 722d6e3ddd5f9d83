"""
Module: engine.py
Description: Inbound webhook verification.

Validates the signature headers, timestamp freshness and signature of a
received webhook before its payload is released for dispatch.

Key Components:
- VerificationContext: the three signature headers plus the raw body
- VerificationEngine.verify(): headers + raw body -> Payload or VerificationError
- Optional duplicate rejection via RecentMessageCache

Order of checks:
1. All three headers present (the body is not read before this)
2. Header timestamp within +/- tolerance of the current time
3. Signature matches under constant-time comparison
4. Body parses as a Payload
5. Message ID not seen before (only when replay protection is enabled)

Dependencies: time, typing
Author: HookRelay Team
"""

import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Union

from ..errors import (
    BadSignatureError,
    DuplicateMessageError,
    MissingHeadersError,
    StaleTimestampError,
)
from ..models.payload import Payload
from ..signing.schemes import SignatureScheme
from ..signing.signer import Signer
from ..utils.logger import get_logger
from .replay import RecentMessageCache

logger = get_logger(__name__)

DEFAULT_TOLERANCE_SECONDS = 5 * 60


@dataclass(frozen=True)
class VerificationContext:
    """Signature headers and raw body of one inbound webhook."""

    message_id: str
    timestamp: str
    signature: str
    body: bytes

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        raw_body: Union[bytes, str],
        scheme: SignatureScheme,
    ) -> "VerificationContext":
        """
        Extract the signature headers case-insensitively.

        Raises:
            MissingHeadersError: If any of the three headers is absent or empty
        """
        lowered = {key.lower(): value for key, value in headers.items()}
        message_id = lowered.get(scheme.id_header.lower())
        timestamp = lowered.get(scheme.timestamp_header.lower())
        signature = lowered.get(scheme.signature_header.lower())

        if not message_id or not timestamp or not signature:
            raise MissingHeadersError()

        body = raw_body.encode("utf-8") if isinstance(raw_body, str) else bytes(raw_body)
        return cls(message_id=message_id, timestamp=timestamp, signature=signature, body=body)


class VerificationEngine:
    """
    Stateless verifier for inbound webhooks.

    Safe to share between concurrent requests: the only state is the
    signer's key, the tolerance and (when enabled) the replay cache,
    which is internally locked.
    """

    def __init__(
        self,
        secret: str,
        scheme: Union[str, SignatureScheme] = "svix",
        tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
        replay_cache: Optional[RecentMessageCache] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize verification engine.

        Args:
            secret: Shared secret, same as the sender's
            scheme: Scheme instance or name, same as the sender's
            tolerance_seconds: Accepted distance between header timestamp and now
            replay_cache: Cache of seen message IDs; None disables duplicate rejection
            clock: Source of the current unix time

        Raises:
            SigningError: If the secret or scheme is invalid
            ValueError: If tolerance_seconds is not positive
        """
        if tolerance_seconds <= 0:
            raise ValueError("tolerance_seconds must be positive")

        self.signer = Signer(secret, scheme)
        self.scheme = self.signer.scheme
        self.tolerance_seconds = tolerance_seconds
        self.replay_cache = replay_cache
        self._clock = clock

    @classmethod
    def from_settings(cls, settings) -> "VerificationEngine":
        """Build an engine from application Settings."""
        replay_cache = None
        if settings.replay_protection:
            replay_cache = RecentMessageCache(ttl_seconds=settings.timestamp_tolerance)
        return cls(
            secret=settings.webhook_secret.get_secret_value(),
            scheme=settings.signature_scheme,
            tolerance_seconds=settings.timestamp_tolerance,
            replay_cache=replay_cache,
        )

    def verify(self, headers: Mapping[str, str], raw_body: Union[bytes, str]) -> Payload:
        """
        Verify an inbound webhook and return its payload.

        Args:
            headers: Request headers (any casing)
            raw_body: Exact request body as received

        Returns:
            Parsed payload, ready for dispatch

        Raises:
            MissingHeadersError: A signature header is absent
            StaleTimestampError: Timestamp unparseable or outside the window
            BadSignatureError: Signature does not match
            MalformedBodyError: Body is not a valid payload
            DuplicateMessageError: Message ID already verified within the window
        """
        context = VerificationContext.from_headers(headers, raw_body, self.scheme)
        timestamp = self._check_timestamp(context)

        if not self.signer.verify(context.message_id, timestamp, context.body, context.signature):
            logger.warning("Webhook signature mismatch", message_id=context.message_id)
            raise BadSignatureError()

        payload = Payload.from_json_bytes(context.body)

        if self.replay_cache is not None and not self.replay_cache.add(context.message_id):
            logger.warning("Duplicate webhook rejected", message_id=context.message_id)
            raise DuplicateMessageError(context.message_id, payload.event)

        logger.debug("Webhook verified", message_id=context.message_id, event_name=payload.event)
        return payload

    def _check_timestamp(self, context: VerificationContext) -> int:
        try:
            timestamp = self.scheme.parse_timestamp(context.timestamp)
        except (TypeError, ValueError, OverflowError):
            logger.warning("Webhook timestamp unparseable", message_id=context.message_id)
            raise StaleTimestampError("Invalid webhook timestamp") from None

        skew = self._clock() - timestamp
        if abs(skew) > self.tolerance_seconds:
            logger.warning(
                "Webhook timestamp outside tolerance",
                message_id=context.message_id,
                skew_seconds=int(skew),
                tolerance_seconds=self.tolerance_seconds,
            )
            raise StaleTimestampError()
        return timestamp
