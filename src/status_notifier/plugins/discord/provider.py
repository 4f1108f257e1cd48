"""Discord webhook channel.

Builds one embed per event, colored by event tone, with role mentions in
the message content for critical and major incidents.
"""

from __future__ import annotations

import logging
import re
from typing import Final, override
from urllib.parse import urlparse

from status_notifier.config.models.providers import DiscordProviderConfig
from status_notifier.plugins.delivery import WebhookChannel
from status_notifier.plugins.formatting import (
    TONE_HEX,
    event_details,
    event_title,
    event_tone,
    event_url,
    footer,
    mention_severity,
)
from status_notifier.types.models import (
    ErrorCode,
    NotificationContext,
    NotificationResult,
    Severity,
    failure,
    success,
)
from status_notifier.types.protocols import HTTPClient

__all__ = ["DiscordChannel", "create_provider"]

_WEBHOOK_PATH_PATTERN: Final[re.Pattern[str]] = re.compile(r"^/api/webhooks/\d+/\S+$")
_MAX_FIELD_VALUE: Final[int] = 1024


class DiscordChannel(WebhookChannel[DiscordProviderConfig]):
    """Discord channel posting embeds to a channel webhook."""

    @override
    def target_url(self) -> str:
        return self.config.webhook_url

    def _mentions(self, context: NotificationContext) -> list[str]:
        severity = mention_severity(context.event)
        if severity is Severity.CRITICAL:
            roles = self.config.mention_roles.critical
        elif severity is Severity.MAJOR:
            roles = self.config.mention_roles.major
        else:
            roles = []
        return [f"<@&{role}>" for role in roles]

    @override
    def build_payload(self, context: NotificationContext) -> dict[str, object]:
        event = context.event
        tone = event_tone(event)

        embed: dict[str, object] = {
            "title": event_title(event)[:256],
            "color": int(TONE_HEX[tone].lstrip("#"), 16),
            "timestamp": event.timestamp.isoformat(),
            "fields": [
                {"name": label, "value": value[:_MAX_FIELD_VALUE], "inline": True}
                for label, value in event_details(event)
            ],
        }
        url = event_url(event) or context.status_page_url
        if url:
            embed["url"] = url
        footer_text = footer(context)
        if footer_text:
            embed["footer"] = {"text": footer_text}

        payload: dict[str, object] = {"embeds": [embed]}
        mentions = self._mentions(context)
        if mentions:
            payload["content"] = " ".join(mentions)
            payload["allowed_mentions"] = {"parse": ["roles"]}
        if self.config.username:
            payload["username"] = self.config.username
        if self.config.avatar_url:
            payload["avatar_url"] = self.config.avatar_url
        return payload

    @override
    async def validate_provider_config(self) -> NotificationResult[None]:
        """Check that the webhook URL has the ``/api/webhooks/<id>/<token>`` shape."""
        if not _WEBHOOK_PATH_PATTERN.match(urlparse(self.config.webhook_url).path):
            return failure(
                ErrorCode.VALIDATION_ERROR,
                "Webhook URL must include /api/webhooks/<id>/<token> path",
                self.config.id,
            )
        return success(None)


def create_provider(
    *,
    config: DiscordProviderConfig,
    logger: logging.Logger,
    http_client: HTTPClient | None = None,
) -> DiscordChannel:
    """Factory function for creating DiscordChannel instances.

    Example:
        >>> config = DiscordProviderConfig(
        ...     id="ops-discord", webhook_url="https://discord.com/api/webhooks/123/abc"
        ... )
        >>> channel = create_provider(config=config, logger=logging.getLogger("discord"))
    """
    if not isinstance(config, DiscordProviderConfig):  # pyright: ignore[reportUnnecessaryIsInstance]
        msg = f"Expected DiscordProviderConfig, got {type(config).__name__}"
        raise TypeError(msg)
    return DiscordChannel(config, logger=logger, http_client=http_client)
