"""Slack incoming-webhook channel.

Renders events as Block Kit messages: a header with an emoji matching the
event tone, optional user mentions for critical and major incidents, a
field section with the event details and a "View Details" button.
"""

from __future__ import annotations

import logging
from typing import override

from status_notifier.config.models.providers import SlackProviderConfig
from status_notifier.plugins.delivery import WebhookChannel
from status_notifier.plugins.formatting import (
    TONE_EMOJI,
    TONE_HEX,
    event_details,
    event_title,
    event_tone,
    event_url,
    footer,
    mention_severity,
)
from status_notifier.types.models import NotificationContext, Severity
from status_notifier.types.protocols import HTTPClient

__all__ = ["SlackChannel", "create_provider"]


class SlackChannel(WebhookChannel[SlackProviderConfig]):
    """Slack channel posting Block Kit payloads to an incoming webhook."""

    @override
    def target_url(self) -> str:
        return self.config.webhook_url

    def _mentions(self, context: NotificationContext) -> list[str]:
        severity = mention_severity(context.event)
        if severity is Severity.CRITICAL:
            users = self.config.mention_users.critical
        elif severity is Severity.MAJOR:
            users = self.config.mention_users.major
        else:
            users = []
        return [f"<@{user}>" for user in users]

    @override
    def build_payload(self, context: NotificationContext) -> dict[str, object]:
        event = context.event
        tone = event_tone(event)
        title = event_title(event)

        blocks: list[dict[str, object]] = [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"{TONE_EMOJI[tone]} {title}",
                    "emoji": True,
                },
            }
        ]

        mentions = self._mentions(context)
        if mentions:
            blocks.append(
                {"type": "section", "text": {"type": "mrkdwn", "text": " ".join(mentions)}}
            )

        fields = [
            {"type": "mrkdwn", "text": f"*{label}:*\n{value}"}
            for label, value in event_details(event)
        ]
        fields.append({"type": "mrkdwn", "text": f"*Time:*\n{event.timestamp.isoformat()}"})
        blocks.append({"type": "section", "fields": fields[:10]})

        url = event_url(event) or context.status_page_url
        if url:
            blocks.append(
                {
                    "type": "actions",
                    "elements": [
                        {
                            "type": "button",
                            "text": {"type": "plain_text", "text": "View Details"},
                            "url": url,
                        }
                    ],
                }
            )

        footer_text = footer(context)
        if footer_text:
            blocks.append(
                {"type": "context", "elements": [{"type": "mrkdwn", "text": footer_text}]}
            )

        payload: dict[str, object] = {
            "text": title,
            "blocks": blocks,
            "attachments": [{"color": TONE_HEX[tone], "fallback": title}],
        }
        if self.config.channel:
            payload["channel"] = self.config.channel
        if self.config.username:
            payload["username"] = self.config.username
        if self.config.icon_emoji:
            payload["icon_emoji"] = self.config.icon_emoji
        return payload


def create_provider(
    *,
    config: SlackProviderConfig,
    logger: logging.Logger,
    http_client: HTTPClient | None = None,
) -> SlackChannel:
    """Factory function for creating SlackChannel instances.

    Args:
        config: Slack configuration (keyword-only)
        logger: Provider logger (keyword-only)
        http_client: HTTP client to use instead of a channel-owned one

    Returns:
        Fully initialized SlackChannel
    """
    if not isinstance(config, SlackProviderConfig):  # pyright: ignore[reportUnnecessaryIsInstance]
        msg = f"Expected SlackProviderConfig, got {type(config).__name__}"
        raise TypeError(msg)
    return SlackChannel(config, logger=logger, http_client=http_client)
