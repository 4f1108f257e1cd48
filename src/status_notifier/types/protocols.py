"""Protocol definitions for component interfaces.

This module defines structural subtyping protocols that establish
contracts for delivery channels and their collaborators without requiring
inheritance.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from status_notifier.types.models import NotificationContext, NotificationResult, Response

if TYPE_CHECKING:
    from status_notifier.config.models.providers import ProviderConfig


@runtime_checkable
class Channel(Protocol):
    """Protocol for channel-specific delivery.

    A channel only knows how to talk to one external system. Filtering,
    rate limiting, retries and statistics are applied around it by
    ``NotificationProvider``.
    """

    async def send_notification(
        self, context: NotificationContext
    ) -> NotificationResult[object]:
        """Deliver one notification.

        Args:
            context: Event plus shared metadata

        Returns:
            Result of the delivery attempt; failures set ``retryable``
        """
        ...

    async def validate_provider_config(self) -> NotificationResult[None]:
        """Check that the channel can be used with its configuration.

        Returns:
            Success, or a failure describing what is wrong
        """
        ...


@runtime_checkable
class ClosableChannel(Channel, Protocol):
    """Channel holding resources that must be released on shutdown."""

    async def aclose(self) -> None:
        """Release network sessions and other resources."""
        ...


class ChannelFactory(Protocol):
    """Constructor registered for a provider type.

    Built-in plugins expose ``create_provider`` functions matching this
    shape. The result may be a channel or an awaitable producing one.
    """

    def __call__(
        self,
        *,
        config: ProviderConfig,
        logger: logging.Logger,
    ) -> Channel | Awaitable[Channel]: ...


class HTTPClient(Protocol):
    """Protocol for HTTP client operations.

    Defines the interface for making JSON HTTP requests with a per-request
    timeout for notification delivery.
    """

    async def request(
        self,
        method: str,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str] | None = None,
        timeout: float,
    ) -> Response:
        """Send an HTTP request with a JSON body.

        Args:
            method: HTTP method (POST, PUT, PATCH)
            url: Target URL
            payload: Request body data
            headers: Extra request headers
            timeout: Request timeout in seconds (keyword-only)

        Returns:
            HTTP response with status, body, and headers
        """
        ...

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        ...
