"""
Module: conftest.py
Description: Shared pytest fixtures for HookRelay tests.

Provides test settings that don't read the environment, delivery and
verification objects built from a shared test secret, and helpers for
producing correctly signed webhook requests.
"""

import time
from typing import Dict, Optional

import pytest
from pydantic_settings import SettingsConfigDict

from hookrelay.config.settings import Settings
from hookrelay.dispatch.dispatcher import EventDispatcher
from hookrelay.models.payload import DeliveryConfig, Payload
from hookrelay.signing.signer import Signer
from hookrelay.verification.engine import VerificationEngine

TEST_SECRET = "whsec_C2FtcGxlX3NlY3JldF9rZXlfZm9yX3Rlc3Rpbmc="
TARGET_URL = "https://receiver.test/webhook"


class TestSettings(Settings):
    """Test settings that don't require environment variables."""

    __test__ = False

    model_config = SettingsConfigDict(
        env_file=None,  # Disable .env file loading for tests
        case_sensitive=False,
        extra="ignore"
    )


def signed_headers(
    body: bytes,
    secret: str = TEST_SECRET,
    scheme: str = "svix",
    message_id: str = "msg_test_0001",
    timestamp: Optional[int] = None,
) -> Dict[str, str]:
    """Build the signature headers a sender would attach to body."""
    signer = Signer(secret, scheme)
    timestamp = int(time.time()) if timestamp is None else timestamp
    signature = signer.sign(message_id, timestamp, body)
    headers = {"Content-Type": "application/json"}
    headers.update(signer.scheme.headers(message_id, timestamp, signature))
    return headers


@pytest.fixture
def test_settings():
    """
    Provide test configuration settings.

    Overrides production settings with test-appropriate values.
    Disables environment variable loading for predictable tests.
    """
    return TestSettings(
        webhook_secret=TEST_SECRET,
        webhook_target_url=TARGET_URL,
        log_level="DEBUG",
        stage="test",
        initial_backoff_interval=0.01,
        max_backoff_interval=0.02,
    )


@pytest.fixture
def sample_event():
    """Typical event name and data used across tests."""
    return {
        "event": "order.created",
        "data": {"order_id": "12345", "amount": 99.99}
    }


@pytest.fixture
def sample_payload(sample_event):
    """Payload built from the sample event."""
    return Payload.create(sample_event["event"], sample_event["data"])


@pytest.fixture
def delivery_config():
    """Delivery config with short backoffs so retry tests stay fast."""
    return DeliveryConfig(
        target_url=TARGET_URL,
        secret=TEST_SECRET,
        max_retries=3,
        request_timeout=5.0,
        initial_backoff_interval=0.01,
        max_backoff_interval=0.02,
    )


@pytest.fixture
def engine():
    """Verification engine sharing the test secret."""
    return VerificationEngine(TEST_SECRET)


@pytest.fixture
def dispatcher():
    """Sequential dispatcher with the default error callback."""
    return EventDispatcher()


@pytest.fixture
def secret():
    """Shared signing secret."""
    return TEST_SECRET


@pytest.fixture
def target_url():
    """Receiver URL used by delivery tests."""
    return TARGET_URL


@pytest.fixture
def make_headers():
    """Factory for correctly signed webhook headers."""
    return signed_headers
