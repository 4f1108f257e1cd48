"""Tests for the generic webhook channel."""

from __future__ import annotations

import base64
import logging

import pytest

from status_notifier.config.models.providers import (
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    WebhookProviderConfig,
)
from status_notifier.plugins.webhook.provider import (
    GenericWebhookChannel,
    auth_headers,
    create_provider,
)
from status_notifier.types.models import NotificationContext
from tests.fixtures.notification_mocks import MockHTTPClient, as_http_client, make_incident_opened

# Test fixtures and helpers


def _make_webhook_config(**fields: object) -> WebhookProviderConfig:
    """Factory for creating test webhook configurations."""
    return WebhookProviderConfig.model_validate(
        {"id": "hook", "type": "webhook", "url": "https://example.com/in", **fields}
    )


class TestAuthHeaders:
    """auth_headers for each scheme."""

    def test_none(self) -> None:
        """No authentication, no headers."""
        assert auth_headers(None) == {}

    def test_bearer(self) -> None:
        """Bearer tokens use the Authorization header."""
        assert auth_headers(BearerAuth(type="bearer", token="abc123")) == {
            "Authorization": "Bearer abc123"
        }

    def test_basic(self) -> None:
        """Basic credentials are base64 encoded."""
        headers = auth_headers(BasicAuth(type="basic", username="user", password="pa55word"))

        expected = base64.b64encode(b"user:pa55word").decode("ascii")
        assert headers == {"Authorization": f"Basic {expected}"}

    def test_api_key(self) -> None:
        """API keys go into the named header."""
        auth = ApiKeyAuth(type="api-key", token="k3y-value", header_name="X-Api-Key")

        assert auth_headers(auth) == {"X-Api-Key": "k3y-value"}


class TestSendNotification:
    """GenericWebhookChannel.send_notification."""

    async def test_sends_event_document(self) -> None:
        """The raw event, message and context are sent."""
        client = MockHTTPClient()
        channel = GenericWebhookChannel(
            _make_webhook_config(),
            logger=logging.getLogger("t"),
            http_client=as_http_client(client),
        )
        context = NotificationContext(
            event=make_incident_opened(),
            organization_name="Example",
            metadata={"team": "sre"},
        )

        result = await channel.send_notification(context)

        assert result.success is True
        method, url, payload, kwargs = client.last_call
        assert (method, url) == ("POST", "https://example.com/in")
        assert payload["event"] == "incident.opened"
        assert payload["timestamp"] == "2024-01-01T12:00:00+00:00"
        data = payload["data"]
        assert isinstance(data, dict)
        assert data["incident_id"] == 42
        assert payload["organization"] == "Example"
        assert payload["metadata"] == {"team": "sre"}
        assert str(payload["message"]).startswith("[MAJOR] Incident: API latency")
        assert kwargs["headers"] == {"Content-Type": "application/json"}

    async def test_method_headers_and_auth(self) -> None:
        """Configured method, headers and authentication are applied."""
        client = MockHTTPClient()
        channel = GenericWebhookChannel(
            _make_webhook_config(
                method="patch",
                headers={"X-Source": "status"},
                authentication={"type": "bearer", "token": "tok3n-value"},
            ),
            logger=logging.getLogger("t"),
            http_client=as_http_client(client),
        )

        _ = await channel.send_notification(NotificationContext(event=make_incident_opened()))

        method, _, _, kwargs = client.last_call
        assert method == "PATCH"
        assert kwargs["headers"] == {
            "Content-Type": "application/json",
            "X-Source": "status",
            "Authorization": "Bearer tok3n-value",
        }


def test_create_provider_type_guard() -> None:
    """create_provider refuses foreign configs."""
    with pytest.raises(TypeError):
        _ = create_provider(config=object(), logger=logging.getLogger("t"))  # pyright: ignore[reportArgumentType]
