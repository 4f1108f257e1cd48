"""Tests for the Slack channel."""

from __future__ import annotations

import logging
from typing import cast

import pytest

from status_notifier.config.models.providers import (
    DiscordProviderConfig,
    SlackProviderConfig,
)
from status_notifier.plugins.slack.provider import SlackChannel, create_provider
from status_notifier.types.models import NotificationContext, NotificationFailure, Severity
from tests.fixtures.notification_mocks import (
    MockHTTPClient,
    as_http_client,
    make_incident_closed,
    make_incident_opened,
    make_response,
)

# Test fixtures and helpers

WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/XXXXXXXX"


def _make_slack_config(**fields: object) -> SlackProviderConfig:
    """Factory for creating test Slack configurations."""
    return SlackProviderConfig.model_validate(
        {"id": "ops-slack", "type": "slack", "webhook_url": WEBHOOK_URL, **fields}
    )


@pytest.fixture
def mock_http_client() -> MockHTTPClient:
    """Provide a mock HTTP client for testing."""
    return MockHTTPClient()


def _channel(client: MockHTTPClient, **fields: object) -> SlackChannel:
    return SlackChannel(
        _make_slack_config(**fields),
        logger=logging.getLogger("test.slack"),
        http_client=as_http_client(client),
    )


def _blocks(payload: object) -> list[dict[str, object]]:
    return cast(list[dict[str, object]], cast(dict[str, object], payload)["blocks"])


class TestBuildPayload:
    """SlackChannel.build_payload."""

    def test_header_fields_and_button(self, mock_http_client: MockHTTPClient) -> None:
        """Blocks contain a header, the details and a link button."""
        channel = _channel(mock_http_client)
        context = NotificationContext(event=make_incident_opened(severity=Severity.CRITICAL))

        payload = channel.build_payload(context)

        blocks = _blocks(payload)
        assert blocks[0]["type"] == "header"
        assert "[CRITICAL] Incident: API latency" in str(blocks[0]["text"])
        assert any(block["type"] == "actions" for block in blocks)
        assert payload["text"] == "[CRITICAL] Incident: API latency"
        assert payload["attachments"] == [
            {"color": "#D13438", "fallback": "[CRITICAL] Incident: API latency"}
        ]

    def test_mentions_for_critical_incidents(self, mock_http_client: MockHTTPClient) -> None:
        """Configured users are mentioned by severity."""
        channel = _channel(mock_http_client, mention_users={"critical": ["U1", "U2"]})

        critical = channel.build_payload(
            NotificationContext(event=make_incident_opened(severity=Severity.CRITICAL))
        )
        minor = channel.build_payload(
            NotificationContext(event=make_incident_opened(severity=Severity.MINOR))
        )

        assert "<@U1> <@U2>" in str(_blocks(critical))
        assert "<@U1>" not in str(_blocks(minor))

    def test_optional_overrides(self, mock_http_client: MockHTTPClient) -> None:
        """channel, username and icon_emoji are passed when set."""
        channel = _channel(
            mock_http_client, channel="#ops", username="status", icon_emoji=":rotating_light:"
        )

        payload = channel.build_payload(NotificationContext(event=make_incident_closed()))

        assert payload["channel"] == "#ops"
        assert payload["username"] == "status"
        assert payload["icon_emoji"] == ":rotating_light:"

    def test_footer_block(self, mock_http_client: MockHTTPClient) -> None:
        """Organization and environment become a context block."""
        channel = _channel(mock_http_client)

        payload = channel.build_payload(
            NotificationContext(
                event=make_incident_opened(), organization_name="Example", environment="prod"
            )
        )

        assert _blocks(payload)[-1]["type"] == "context"
        assert "Example | prod" in str(_blocks(payload)[-1])


class TestSendNotification:
    """SlackChannel.send_notification."""

    async def test_posts_to_webhook(self, mock_http_client: MockHTTPClient) -> None:
        """The payload is POSTed to the webhook with the configured timeout."""
        channel = _channel(mock_http_client, timeout_ms=2500)

        result = await channel.send_notification(NotificationContext(event=make_incident_opened()))

        assert result.success is True
        method, url, payload, kwargs = mock_http_client.last_call
        assert method == "POST"
        assert url == WEBHOOK_URL
        assert "blocks" in payload
        assert kwargs["timeout"] == 2.5

    async def test_server_error_is_retryable(self) -> None:
        """Slack 5xx responses may be retried."""
        client = MockHTTPClient(make_response(500, "internal_error"))
        channel = _channel(client)

        result = await channel.send_notification(NotificationContext(event=make_incident_opened()))

        assert isinstance(result, NotificationFailure)
        assert result.error.retryable is True

    async def test_injected_client_is_not_closed(self, mock_http_client: MockHTTPClient) -> None:
        """Only channel-owned clients are closed."""
        channel = _channel(mock_http_client)

        await channel.aclose()

        mock_http_client.aclose.assert_not_awaited()


class TestCreateProvider:
    """Factory function."""

    def test_creates_channel(self) -> None:
        """create_provider returns a SlackChannel."""
        channel = create_provider(config=_make_slack_config(), logger=logging.getLogger("t"))

        assert isinstance(channel, SlackChannel)

    def test_rejects_foreign_config(self) -> None:
        """Configs of other types are refused."""
        config = DiscordProviderConfig.model_validate(
            {
                "id": "d",
                "type": "discord",
                "webhook_url": "https://discord.com/api/webhooks/1/abc",
            }
        )

        with pytest.raises(TypeError, match="Expected SlackProviderConfig"):
            _ = create_provider(config=config, logger=logging.getLogger("t"))  # pyright: ignore[reportArgumentType]
