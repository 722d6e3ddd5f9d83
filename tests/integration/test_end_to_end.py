"""
Module: test_end_to_end.py
Description: Integration tests delivering webhooks into the receiver app.

A DeliveryClient sends over httpx's ASGI transport straight into the
FastAPI application, so signing, transport, verification and dispatch
are exercised together without a network.
"""

import asyncio

import httpx
import pytest

from hookrelay.delivery.client import DeliveryClient
from hookrelay.dispatch.dispatcher import EventDispatcher
from hookrelay.errors import ClientError
from hookrelay.handlers.dependencies import get_dispatcher, get_metrics_client, get_verification_engine
from hookrelay.main import create_app
from hookrelay.models.payload import DeliveryConfig
from hookrelay.verification.engine import VerificationEngine
from hookrelay.verification.replay import RecentMessageCache

RECEIVER_URL = "http://receiver.test/webhook"


def _receiver(engine: VerificationEngine, dispatcher: EventDispatcher):
    app = create_app()
    app.dependency_overrides[get_verification_engine] = lambda: engine
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_metrics_client] = lambda: None
    return app


def _config(secret: str, scheme: str = "svix") -> DeliveryConfig:
    return DeliveryConfig(
        target_url=RECEIVER_URL,
        secret=secret,
        signature_scheme=scheme,
        initial_backoff_interval=0.01,
        max_backoff_interval=0.02,
    )


class TestEndToEnd:
    """End-to-end delivery into the receiver."""

    @pytest.mark.asyncio
    async def test_order_created_delivered_and_handled(self):
        """Test the sample event reaches its handler exactly once."""
        received = []
        dispatcher = EventDispatcher()
        dispatcher.register("order.created", lambda data, payload: received.append(data))
        app = _receiver(VerificationEngine("s3cr3t"), dispatcher)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app)) as http_client:
            client = DeliveryClient(_config("s3cr3t"), http_client=http_client)
            result = await client.send("order.created", {"order_id": "12345", "amount": 99.99})

        assert result.success is True
        assert result.status_code == 200
        assert result.attempts == 1
        assert received == [{"order_id": "12345", "amount": 99.99}]

    @pytest.mark.asyncio
    async def test_wrong_secret_is_permanent_failure(self):
        """Test a 401 from the receiver is not retried and nothing is handled."""
        received = []
        dispatcher = EventDispatcher()
        dispatcher.register_wildcard(lambda data, payload: received.append(data))
        app = _receiver(VerificationEngine("s3cr3t"), dispatcher)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app)) as http_client:
            client = DeliveryClient(_config("not-the-secret"), http_client=http_client)
            result = await client.send("order.created", {"order_id": "12345"})

        assert result.success is False
        assert result.status_code == 401
        assert result.attempts == 1
        assert isinstance(result.error, ClientError)
        assert received == []

    @pytest.mark.asyncio
    async def test_simple_scheme(self):
        """Test the simple scheme works end to end."""
        received = []
        dispatcher = EventDispatcher()
        dispatcher.register("invoice.paid", lambda data, payload: received.append(payload.event))
        app = _receiver(VerificationEngine("s3cr3t", scheme="simple"), dispatcher)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app)) as http_client:
            client = DeliveryClient(_config("s3cr3t", scheme="simple"), http_client=http_client)
            result = await client.send("invoice.paid", {"invoice_id": "inv_1"})

        assert result.success is True
        assert received == ["invoice.paid"]

    @pytest.mark.asyncio
    async def test_parallel_handlers_with_replay_protection(self, secret):
        """Test concurrent handlers and distinct messages with replay protection on."""
        received = []
        dispatcher = EventDispatcher(parallel=True)

        async def slow(data, payload):
            await asyncio.sleep(0.01)
            received.append(("slow", data["n"]))

        dispatcher.register("tick", slow)
        dispatcher.register_wildcard(lambda data, payload: received.append(("all", data["n"])))
        engine = VerificationEngine(secret, replay_cache=RecentMessageCache(ttl_seconds=300))
        app = _receiver(engine, dispatcher)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app)) as http_client:
            client = DeliveryClient(_config(secret), http_client=http_client)
            results = [await client.send("tick", {"n": n}) for n in range(3)]

        assert all(result.success for result in results)
        assert sorted(received) == sorted([("slow", n) for n in range(3)] + [("all", n) for n in range(3)])
