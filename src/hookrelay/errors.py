"""
Module: errors.py
Description: Error taxonomy for webhook delivery and verification.

Delivery-side errors are returned to the caller inside a DeliveryResult,
verification-side errors are raised by the VerificationEngine and mapped
to HTTP responses by the receiver endpoint, and handler errors are only
ever reported through the dispatcher's error callback.

Key Components:
- SerializationError, SigningError: fatal, never retried
- NetworkError, ServerError: retryable transport failures
- ClientError: permanent 4xx failure
- RetriesExhausted, CancellationError: terminal delivery outcomes
- VerificationError and subtypes: inbound rejection reasons
- HandlerError: isolated handler failure

Dependencies: typing
Author: HookRelay Team
"""

from typing import Optional


class WebhookError(Exception):
    """Base class for all webhook errors."""


class SerializationError(WebhookError):
    """Payload could not be encoded as JSON."""


class SigningError(WebhookError):
    """Secret is missing/invalid or the signing primitive failed."""


class DeliveryError(WebhookError):
    """
    Base class for outbound delivery failures.

    Attributes:
        status_code: HTTP status of the failed attempt, if a response was received
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(DeliveryError):
    """Connection refused, DNS failure or request timeout. Retryable."""


class ClientError(DeliveryError):
    """Receiver answered 4xx. Permanent, never retried."""


class ServerError(DeliveryError):
    """Receiver answered 5xx. Retryable."""


class RetriesExhausted(DeliveryError):
    """
    Every allowed attempt failed with a retryable error.

    Attributes:
        last_error: The error raised by the final attempt
        attempts: Number of attempts made
    """

    def __init__(self, last_error: DeliveryError, attempts: int, status_code: Optional[int] = None):
        super().__init__(
            f"delivery failed after {attempts} attempt(s): {last_error}",
            status_code=status_code if status_code is not None else last_error.status_code,
        )
        self.last_error = last_error
        self.attempts = attempts


class CancellationError(DeliveryError):
    """Send was aborted by the caller or its deadline expired."""


class VerificationError(WebhookError):
    """
    Inbound webhook rejected.

    Attributes:
        http_status: Status code the receiver endpoint answers with
        public_message: Message safe to return to the sender
    """

    http_status = 401
    public_message = "Webhook verification failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)


class MissingHeadersError(VerificationError):
    public_message = "Missing signature headers"


class StaleTimestampError(VerificationError):
    public_message = "Webhook timestamp outside tolerance window"


class BadSignatureError(VerificationError):
    public_message = "Invalid webhook signature"


class MalformedBodyError(VerificationError):
    http_status = 400
    public_message = "Malformed webhook body"


class DuplicateMessageError(VerificationError):
    """Correctly signed message ID already seen inside the tolerance window."""

    http_status = 200
    public_message = "Duplicate webhook ignored"

    def __init__(self, message_id: str, event: str):
        super().__init__(f"message {message_id} already processed")
        self.message_id = message_id
        self.event = event


class HandlerError(WebhookError):
    """
    An event handler raised during dispatch.

    Attributes:
        event: Event name being dispatched
        handler_name: Qualified name of the failing handler
        original: The exception the handler raised
    """

    def __init__(self, event: str, handler_name: str, original: BaseException):
        super().__init__(f"handler {handler_name} failed for event {event}: {original}")
        self.event = event
        self.handler_name = handler_name
        self.original = original
