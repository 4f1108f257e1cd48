"""Generic JSON webhook channel.

Sends the event as structured data so that any HTTP endpoint can consume
it. Authentication is applied as request headers according to the
configured scheme.
"""

from __future__ import annotations

import base64
import logging
from typing import assert_never, override

from status_notifier.config.models.providers import (
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    WebhookProviderConfig,
)
from status_notifier.plugins.delivery import WebhookChannel
from status_notifier.plugins.formatting import format_message
from status_notifier.types.models import NotificationContext, event_to_dict
from status_notifier.types.protocols import HTTPClient

__all__ = ["GenericWebhookChannel", "auth_headers", "create_provider"]


def auth_headers(auth: BearerAuth | BasicAuth | ApiKeyAuth | None) -> dict[str, str]:
    """Build the authentication headers for a webhook request."""
    match auth:
        case None:
            return {}
        case BearerAuth():
            return {"Authorization": f"Bearer {auth.token}"}
        case BasicAuth():
            credentials = base64.b64encode(f"{auth.username}:{auth.password}".encode()).decode(
                "ascii"
            )
            return {"Authorization": f"Basic {credentials}"}
        case ApiKeyAuth():
            return {auth.header_name: auth.token}
        case _:
            assert_never(auth)


class GenericWebhookChannel(WebhookChannel[WebhookProviderConfig]):
    """Channel sending the raw event document to an arbitrary URL."""

    def __init__(
        self,
        config: WebhookProviderConfig,
        *,
        logger: logging.Logger,
        http_client: HTTPClient | None = None,
    ) -> None:
        super().__init__(config, logger=logger, http_client=http_client)
        self.method = config.method

    @override
    def target_url(self) -> str:
        return self.config.url

    @override
    def request_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", **self.config.headers}
        headers.update(auth_headers(self.config.authentication))
        return headers

    @override
    def build_payload(self, context: NotificationContext) -> dict[str, object]:
        event = context.event
        return {
            "event": str(event.kind),
            "timestamp": event.timestamp.isoformat(),
            "data": event_to_dict(event),
            "message": format_message(context),
            "organization": context.organization_name,
            "environment": context.environment,
            "status_page_url": context.status_page_url,
            "metadata": dict(context.metadata),
        }


def create_provider(
    *,
    config: WebhookProviderConfig,
    logger: logging.Logger,
    http_client: HTTPClient | None = None,
) -> GenericWebhookChannel:
    """Factory function for creating GenericWebhookChannel instances."""
    if not isinstance(config, WebhookProviderConfig):  # pyright: ignore[reportUnnecessaryIsInstance]
        msg = f"Expected WebhookProviderConfig, got {type(config).__name__}"
        raise TypeError(msg)
    return GenericWebhookChannel(config, logger=logger, http_client=http_client)
