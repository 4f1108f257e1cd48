"""Microsoft Teams incoming-webhook channel using legacy MessageCards."""

from __future__ import annotations

import logging
from typing import override

from status_notifier.config.models.providers import MSTeamsProviderConfig
from status_notifier.plugins.delivery import WebhookChannel
from status_notifier.plugins.formatting import (
    TONE_HEX,
    Tone,
    event_details,
    event_title,
    event_tone,
    event_url,
    footer,
)
from status_notifier.types.models import NotificationContext
from status_notifier.types.protocols import HTTPClient

__all__ = ["MSTeamsChannel", "create_provider"]


class MSTeamsChannel(WebhookChannel[MSTeamsProviderConfig]):
    """Teams channel rendering events as MessageCards with a fact list."""

    @override
    def target_url(self) -> str:
        return self.config.webhook_url

    def theme_color(self, tone: Tone) -> str:
        """Card accent color without the leading ``#``."""
        colors = self.config.theme_color
        match tone:
            case "critical":
                color = colors.critical
            case "major":
                color = colors.major
            case "minor":
                color = colors.minor
            case "maintenance":
                color = colors.maintenance
            case _:
                color = TONE_HEX[tone]
        return color.lstrip("#")

    @override
    def build_payload(self, context: NotificationContext) -> dict[str, object]:
        event = context.event
        title = event_title(event)
        facts = [{"name": label, "value": value} for label, value in event_details(event)]
        facts.append({"name": "Time", "value": event.timestamp.isoformat()})

        section: dict[str, object] = {"activityTitle": title, "facts": facts, "markdown": True}
        footer_text = footer(context)
        if footer_text:
            section["activitySubtitle"] = footer_text

        card: dict[str, object] = {
            "@type": "MessageCard",
            "@context": "https://schema.org/extensions",
            "summary": title,
            "themeColor": self.theme_color(event_tone(event)),
            "title": title,
            "sections": [section],
        }
        url = event_url(event) or context.status_page_url
        if url:
            card["potentialAction"] = [
                {
                    "@type": "OpenUri",
                    "name": "View Details",
                    "targets": [{"os": "default", "uri": url}],
                }
            ]
        return card


def create_provider(
    *,
    config: MSTeamsProviderConfig,
    logger: logging.Logger,
    http_client: HTTPClient | None = None,
) -> MSTeamsChannel:
    """Factory function for creating MSTeamsChannel instances."""
    if not isinstance(config, MSTeamsProviderConfig):  # pyright: ignore[reportUnnecessaryIsInstance]
        msg = f"Expected MSTeamsProviderConfig, got {type(config).__name__}"
        raise TypeError(msg)
    return MSTeamsChannel(config, logger=logger, http_client=http_client)
