"""
Module: delivery/retry.py
Description: Retry policy for webhook delivery.

Classifies each attempt's outcome and builds the tenacity retry loop
with exponential backoff (and optional jitter) used by DeliveryClient.

Classification:
- 2xx/3xx: success
- 4xx: ClientError, permanent, never retried
- 5xx: ServerError, retried
- transport failures: NetworkError, retried
"""

from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from ..errors import ClientError, NetworkError, ServerError
from ..models.payload import DeliveryConfig
from ..utils.logger import get_logger

logger = get_logger(__name__)

RETRYABLE_ERRORS = (NetworkError, ServerError)

# Longest response body excerpt kept in error messages
MAX_ERROR_BODY = 500


def classify_response(response: httpx.Response) -> int:
    """
    Map an HTTP response to success or a typed failure.

    Args:
        response: Response received for one attempt

    Returns:
        The status code when the attempt succeeded

    Raises:
        ClientError: For 4xx responses
        ServerError: For 5xx (and any other non-success) responses
    """
    status = response.status_code
    if 200 <= status < 400:
        return status

    excerpt = response.text[:MAX_ERROR_BODY]
    if 400 <= status < 500:
        raise ClientError(f"receiver rejected webhook with status {status}: {excerpt}", status_code=status)
    raise ServerError(f"receiver failed with status {status}: {excerpt}", status_code=status)


def classify_transport_error(error: httpx.TransportError) -> NetworkError:
    """Wrap an httpx transport failure as a retryable NetworkError."""
    if isinstance(error, httpx.TimeoutException):
        return NetworkError(f"request timed out: {type(error).__name__}")
    return NetworkError(f"network error: {type(error).__name__}: {error}")


def build_retrying(config: DeliveryConfig, log: Optional[object] = None) -> AsyncRetrying:
    """
    Build the retry loop for one logical send.

    Args:
        config: Delivery configuration (attempt budget, backoff bounds, jitter)
        log: Bound logger carrying per-send context

    Returns:
        AsyncRetrying that stops after config.max_retries attempts, retries
        only NetworkError/ServerError, and sleeps with asyncio.sleep so a
        cancelled send interrupts the backoff immediately
    """
    log = log or logger

    wait = wait_exponential(
        multiplier=config.initial_backoff_interval,
        exp_base=2,
        max=config.max_backoff_interval,
    )
    if config.backoff_jitter > 0:
        wait = wait + wait_random(0, config.backoff_jitter)

    def log_before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        log.warning(
            "Retrying webhook delivery",
            attempt=retry_state.attempt_number,
            max_attempts=config.max_retries,
            next_attempt_in_seconds=round(retry_state.next_action.sleep, 3) if retry_state.next_action else None,
            status_code=getattr(error, "status_code", None),
            error=str(error),
            error_type=type(error).__name__,
        )

    return AsyncRetrying(
        stop=stop_after_attempt(config.max_retries),
        wait=wait,
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=log_before_sleep,
        reraise=False,
    )
