"""HTTP client abstraction for webhook notification delivery.

``AIOHTTPClient`` implements the ``HTTPClient`` protocol on top of aiohttp.
It performs a single request per call and enforces the per-request timeout
with ``asyncio.timeout``; retries are the provider pipeline's job, so this
client never retries on its own.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Self

import aiohttp

from status_notifier.types.models import Response
from status_notifier.utils.sanitization import sanitize_url


class AIOHTTPClient:
    """Async HTTP client sending JSON bodies.

    The aiohttp session is created on first use so that instances can be
    built outside a running event loop (for example while the registry
    constructs a channel) and closed later with ``aclose``.

    Example:
        >>> async with AIOHTTPClient() as client:
        ...     response = await client.request(
        ...         "POST",
        ...         "https://webhook.example.com/notify",
        ...         {"message": "test"},
        ...         timeout=10.0,
        ...     )
    """

    def __init__(
        self,
        *,
        default_timeout_seconds: float = 10.0,
        user_agent: str = "status-notifier",
    ) -> None:
        """Initialize HTTP client.

        Args:
            default_timeout_seconds: Session-wide timeout ceiling in seconds
            user_agent: Value of the User-Agent header
        """
        self._default_timeout_seconds: float = default_timeout_seconds
        self._user_agent: str = user_agent
        self._session: aiohttp.ClientSession | None = None
        self._logger: logging.Logger = logging.getLogger(__name__)

    async def __aenter__(self) -> Self:
        """Enter async context manager and create the aiohttp session."""
        _ = self._ensure_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager and cleanup resources."""
        await self.aclose()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._default_timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                json_serialize=json.dumps,
                headers={"User-Agent": self._user_agent},
            )
        return self._session

    async def aclose(self) -> None:
        """Close the aiohttp session if one was opened."""
        if self._session is not None:
            await self._session.close()
            self._session = None

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
            method: HTTP method
            url: Target URL
            payload: Request body data (will be JSON-encoded)
            headers: Extra request headers
            timeout: Request timeout in seconds (keyword-only)

        Returns:
            HTTP response with status, body, and headers. Non-JSON bodies are
            returned as text.

        Raises:
            TimeoutError: If request exceeds timeout
            ValueError: If URL is malformed
            aiohttp.ClientError: For connection issues
        """
        session = self._ensure_session()
        safe_url = sanitize_url(url)
        self._logger.debug("Initiating %s request to %s", method, safe_url)

        try:
            async with asyncio.timeout(timeout):
                async with session.request(
                    method,
                    url,
                    json=dict(payload),
                    headers=dict(headers) if headers else None,
                ) as response:
                    body: Mapping[str, object] | str
                    try:
                        body = await response.json()  # pyright: ignore[reportAny]
                    except (aiohttp.ContentTypeError, ValueError):
                        body = await response.text()

                    return Response(
                        status=response.status,
                        body=body,
                        headers=dict(response.headers),
                    )
        except TimeoutError:
            self._logger.warning("Request to %s timed out after %.1fs", safe_url, timeout)
            raise
        except aiohttp.InvalidURL as exc:
            self._logger.error("Invalid URL: %s", safe_url)
            msg = f"Malformed URL: {safe_url}"
            raise ValueError(msg) from exc
        except aiohttp.ClientError as exc:
            self._logger.warning("Client error for %s: %s", safe_url, type(exc).__name__)
            raise

    async def post(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str] | None = None,
        timeout: float,
    ) -> Response:
        """Send HTTP POST request with timeout."""
        return await self.request("POST", url, payload, headers=headers, timeout=timeout)
