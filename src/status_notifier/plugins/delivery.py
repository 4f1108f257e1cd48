"""HTTP delivery helper shared by the webhook-based channels.

Turns one HTTP request into a ``NotificationResult``, classifying the
outcome so the pipeline knows whether to retry:

* 2xx is success.
* 429 and 5xx are retryable ``CHANNEL_ERROR`` failures.
* Any other status is a non-retryable ``CHANNEL_ERROR``.
* Timeouts are retryable ``TIMEOUT`` failures and connection problems
  retryable ``NETWORK_ERROR`` failures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

import aiohttp

from status_notifier.types.models import (
    ErrorCode,
    NotificationContext,
    NotificationResult,
    failure,
    success,
)
from status_notifier.types.protocols import HTTPClient
from status_notifier.utils.http_client import AIOHTTPClient
from status_notifier.utils.sanitization import sanitize_exception, sanitize_url

if TYPE_CHECKING:
    from status_notifier.config.models.base import BaseProviderConfig

_MAX_ERROR_BODY = 200


@dataclass(slots=True, frozen=True)
class DeliveryReceipt:
    """Data returned by a successful HTTP delivery."""

    status: int
    body: Mapping[str, object] | str


def is_retryable_status(status: int) -> bool:
    """Return True for statuses worth retrying (429 and 5xx)."""
    return status == 429 or 500 <= status < 600


def _body_excerpt(body: Mapping[str, object] | str) -> str:
    text = body if isinstance(body, str) else str(dict(body))
    text = sanitize_url(text.strip())
    return text[:_MAX_ERROR_BODY]


async def send_json(
    client: HTTPClient,
    *,
    url: str,
    payload: Mapping[str, object],
    provider_id: str,
    timeout: float,
    method: str = "POST",
    headers: Mapping[str, str] | None = None,
    logger: logging.Logger | None = None,
) -> NotificationResult[DeliveryReceipt]:
    """Send ``payload`` and classify the outcome.

    Args:
        client: HTTP client performing the request
        url: Target URL
        payload: JSON body
        provider_id: Provider id recorded on failures
        timeout: Request timeout in seconds
        method: HTTP method
        headers: Extra request headers
        logger: Logger for diagnostic output

    Returns:
        Success carrying the status and body, or a classified failure
    """
    log = logger or logging.getLogger(__name__)
    safe_url = sanitize_url(url)

    try:
        response = await client.request(method, url, payload, headers=headers, timeout=timeout)
    except TimeoutError as exc:
        return failure(
            ErrorCode.TIMEOUT,
            f"Request to {safe_url} timed out after {timeout:.1f}s",
            provider_id,
            retryable=True,
            cause=exc,
        )
    except aiohttp.ClientError as exc:
        return failure(
            ErrorCode.NETWORK_ERROR,
            f"Network error for {safe_url}: {sanitize_exception(exc)}",
            provider_id,
            retryable=True,
            cause=exc,
        )
    except ValueError as exc:
        return failure(
            ErrorCode.CHANNEL_ERROR,
            sanitize_exception(exc),
            provider_id,
            retryable=False,
            cause=exc,
        )

    if 200 <= response.status < 300:
        log.debug("%s %s -> %d", method, safe_url, response.status)
        return success(DeliveryReceipt(status=response.status, body=response.body))

    retryable = is_retryable_status(response.status)
    log.warning(
        "%s %s -> %d (%s)",
        method,
        safe_url,
        response.status,
        "retryable" if retryable else "non-retryable",
    )
    return failure(
        ErrorCode.CHANNEL_ERROR,
        f"HTTP {response.status} from {safe_url}: {_body_excerpt(response.body)}",
        provider_id,
        retryable=retryable,
        cause={"status": response.status},
    )


class WebhookChannel[C: BaseProviderConfig](ABC):
    """Base for channels that deliver one JSON document per notification.

    Subclasses build the payload and name the target URL; the request,
    outcome classification and client lifetime are handled here. When no
    HTTP client is injected an ``AIOHTTPClient`` is created and owned by the
    channel.
    """

    method: str = "POST"

    def __init__(
        self,
        config: C,
        *,
        logger: logging.Logger,
        http_client: HTTPClient | None = None,
    ) -> None:
        self.config: C = config
        self._logger: logging.Logger = logger
        self._owns_client: bool = http_client is None
        self._http_client: HTTPClient = http_client or AIOHTTPClient(
            default_timeout_seconds=config.timeout_ms / 1000.0
        )

    @abstractmethod
    def target_url(self) -> str:
        """URL the payload is sent to."""

    @abstractmethod
    def build_payload(self, context: NotificationContext) -> dict[str, object]:
        """Render ``context`` into the channel's JSON document."""

    def request_headers(self) -> dict[str, str] | None:
        """Extra headers for every request."""
        return None

    async def send_notification(
        self, context: NotificationContext
    ) -> NotificationResult[object]:
        """Deliver one notification."""
        result = await send_json(
            self._http_client,
            url=self.target_url(),
            payload=self.build_payload(context),
            provider_id=self.config.id,
            timeout=self.config.timeout_ms / 1000.0,
            method=self.method,
            headers=self.request_headers(),
            logger=self._logger,
        )
        return cast(NotificationResult[object], result)

    async def validate_provider_config(self) -> NotificationResult[None]:
        """Check the target URL; the config model already enforced its shape."""
        if not self.target_url():
            return failure(
                ErrorCode.VALIDATION_ERROR, "Target URL is empty", self.config.id
            )
        return success(None)

    async def aclose(self) -> None:
        """Close the HTTP client if this channel created it."""
        if self._owns_client:
            await self._http_client.aclose()
