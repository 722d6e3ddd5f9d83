"""
Module: test_webhook_routes.py
Description: Unit tests for the receiver endpoint and health check.

Tests POST /webhook with overridden dependencies. Covers accepted
webhooks, each rejection class, handler failures and duplicate
acknowledgements.
"""

import time
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from hookrelay import __version__
from hookrelay.dispatch.dispatcher import EventDispatcher
from hookrelay.handlers.dependencies import get_dispatcher, get_metrics_client, get_verification_engine
from hookrelay.main import create_app
from hookrelay.verification.engine import VerificationEngine
from hookrelay.verification.replay import RecentMessageCache


@pytest.fixture
def metrics_client():
    return MagicMock()


@pytest.fixture
def app(engine, dispatcher, metrics_client):
    """Application with test engine, dispatcher and metrics mock."""
    app = create_app()
    app.dependency_overrides[get_verification_engine] = lambda: engine
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_metrics_client] = lambda: metrics_client
    yield app
    app.dependency_overrides = {}


@pytest.fixture
def client(app):
    return TestClient(app)


class TestReceiveWebhook:
    """Test cases for POST /webhook."""

    def test_valid_webhook(self, client, dispatcher, sample_payload, make_headers, metrics_client):
        """Test a signed webhook is acknowledged and dispatched."""
        received = []
        dispatcher.register("order.created", lambda data, payload: received.append(data))
        body = sample_payload.to_json_bytes()

        response = client.post("/webhook", content=body, headers=make_headers(body, message_id="msg_abc"))

        assert response.status_code == 200
        assert response.json() == {
            "message": "Webhook verified and processed",
            "event": "order.created",
            "msgId": "msg_abc",
        }
        assert received == [{"order_id": "12345", "amount": 99.99}]
        metrics_client.webhook_verified.assert_called_once_with("order.created", handler_errors=0)

    def test_missing_headers(self, client, sample_payload, metrics_client):
        """Test a request without signature headers gets 401."""
        response = client.post(
            "/webhook",
            content=sample_payload.to_json_bytes(),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Missing signature headers"}
        metrics_client.webhook_rejected.assert_called_once_with("MissingHeadersError")
        metrics_client.webhook_verified.assert_not_called()

    def test_bad_signature(self, client, dispatcher, sample_payload, make_headers):
        """Test a wrongly signed webhook gets 401 and is not dispatched."""
        received = []
        dispatcher.register_wildcard(lambda data, payload: received.append(data))
        body = sample_payload.to_json_bytes()

        response = client.post("/webhook", content=body, headers=make_headers(body, secret="wrong"))

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid webhook signature"}
        assert received == []

    def test_stale_timestamp(self, client, sample_payload, make_headers):
        """Test an old webhook gets 401."""
        body = sample_payload.to_json_bytes()
        headers = make_headers(body, timestamp=int(time.time()) - 3600)

        response = client.post("/webhook", content=body, headers=headers)

        assert response.status_code == 401
        assert "error" in response.json()

    def test_malformed_body(self, client, make_headers):
        """Test a signed but malformed body gets 400."""
        body = b'{"not": "a payload"}'

        response = client.post("/webhook", content=body, headers=make_headers(body))

        assert response.status_code == 400
        assert response.json() == {"error": "Malformed webhook body"}

    def test_handler_failure_still_acknowledged(self, client, dispatcher, sample_payload, make_headers, metrics_client):
        """Test a raising handler does not change the response."""
        calls = []

        def failing(data, payload):
            raise RuntimeError("downstream unavailable")

        dispatcher.register("order.created", failing)
        dispatcher.register("order.created", lambda data, payload: calls.append("after"))
        body = sample_payload.to_json_bytes()

        response = client.post("/webhook", content=body, headers=make_headers(body))

        assert response.status_code == 200
        assert calls == ["after"]
        metrics_client.webhook_verified.assert_called_once_with("order.created", handler_errors=1)

    def test_metrics_disabled(self, app, sample_payload, make_headers):
        """Test the route works without a metrics client."""
        app.dependency_overrides[get_metrics_client] = lambda: None
        body = sample_payload.to_json_bytes()

        response = TestClient(app).post("/webhook", content=body, headers=make_headers(body))

        assert response.status_code == 200


class TestDuplicateWebhooks:
    """Test cases for replay-protected receivers."""

    def test_duplicate_acknowledged_once_dispatched(self, app, secret, sample_payload, make_headers, metrics_client):
        """Test a resent message is acknowledged but not dispatched again."""
        received = []
        dispatcher = EventDispatcher()
        dispatcher.register("order.created", lambda data, payload: received.append(data))
        engine = VerificationEngine(secret, replay_cache=RecentMessageCache(ttl_seconds=300))
        app.dependency_overrides[get_verification_engine] = lambda: engine
        app.dependency_overrides[get_dispatcher] = lambda: dispatcher
        client = TestClient(app)

        body = sample_payload.to_json_bytes()
        headers = make_headers(body, message_id="msg_dup")
        first = client.post("/webhook", content=body, headers=headers)
        second = client.post("/webhook", content=body, headers=headers)

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json() == {
            "message": "Duplicate webhook ignored",
            "event": "order.created",
            "msgId": "msg_dup",
        }
        assert len(received) == 1
        metrics_client.webhook_duplicate.assert_called_once_with("order.created")


class TestSimpleSchemeReceiver:
    """Test cases for a receiver configured with the simple scheme."""

    def test_valid_webhook(self, app, sample_payload, make_headers):
        """Test X-Webhook-* headers are accepted and the ID echoed."""
        app.dependency_overrides[get_verification_engine] = lambda: VerificationEngine("s3cr3t", scheme="simple")
        body = sample_payload.to_json_bytes()
        headers = make_headers(body, secret="s3cr3t", scheme="simple", message_id="msg_simple")

        response = TestClient(app).post("/webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert response.json()["msgId"] == "msg_simple"


def test_health(client):
    """Test the health check endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["version"] == __version__
