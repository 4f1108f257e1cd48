"""Tests for the Microsoft Teams channel."""

from __future__ import annotations

import logging
from typing import cast

from status_notifier.config.models.providers import MSTeamsProviderConfig
from status_notifier.plugins.msteams.provider import MSTeamsChannel, create_provider
from status_notifier.types.models import NotificationContext, Severity
from tests.fixtures.notification_mocks import (
    MockHTTPClient,
    as_http_client,
    make_incident_closed,
    make_incident_opened,
    make_maintenance_scheduled,
)

WEBHOOK_URL = "https://example.webhook.office.com/webhookb2/abc/IncomingWebhook/def/ghi"


def _make_channel(client: MockHTTPClient, **fields: object) -> MSTeamsChannel:
    config = MSTeamsProviderConfig.model_validate(
        {"id": "teams", "type": "msteams", "webhook_url": WEBHOOK_URL, **fields}
    )
    return MSTeamsChannel(config, logger=logging.getLogger("t"), http_client=as_http_client(client))


class TestBuildPayload:
    """MessageCard rendering."""

    def test_message_card_shape(self) -> None:
        """Cards carry the title, facts and an OpenUri action."""
        channel = _make_channel(MockHTTPClient())

        card = channel.build_payload(
            NotificationContext(event=make_incident_opened(severity=Severity.MAJOR))
        )

        assert card["@type"] == "MessageCard"
        assert card["themeColor"] == "FF8C00"
        assert card["title"] == "[MAJOR] Incident: API latency"
        sections = cast(list[dict[str, object]], card["sections"])
        facts = cast(list[dict[str, str]], sections[0]["facts"])
        assert {"name": "Severity", "value": "major"} in facts
        actions = cast(list[dict[str, object]], card["potentialAction"])
        assert actions[0]["targets"] == [
            {"os": "default", "uri": "https://status.example.com/incidents/42"}
        ]

    def test_configured_theme_colors(self) -> None:
        """Configured colors replace the defaults."""
        channel = _make_channel(
            MockHTTPClient(), theme_color={"critical": "#aa0000", "maintenance": "#00aa00"}
        )

        critical = channel.build_payload(
            NotificationContext(event=make_incident_opened(severity=Severity.CRITICAL))
        )
        maintenance = channel.build_payload(NotificationContext(event=make_maintenance_scheduled()))
        recovered = channel.build_payload(NotificationContext(event=make_incident_closed()))

        assert critical["themeColor"] == "AA0000"
        assert maintenance["themeColor"] == "00AA00"
        assert recovered["themeColor"] == "107C10"


async def test_send_posts_card() -> None:
    """send_notification posts to the webhook."""
    client = MockHTTPClient()
    channel = _make_channel(client)

    result = await channel.send_notification(NotificationContext(event=make_incident_opened()))

    assert result.success is True
    assert client.last_call[1] == WEBHOOK_URL


def test_create_provider() -> None:
    """Factory builds the channel."""
    config = MSTeamsProviderConfig.model_validate(
        {"id": "teams", "type": "msteams", "webhook_url": WEBHOOK_URL}
    )

    assert isinstance(create_provider(config=config, logger=logging.getLogger("t")), MSTeamsChannel)
