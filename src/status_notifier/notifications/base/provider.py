"""Delivery pipeline shared by every notification provider.

``NotificationProvider`` wraps one channel and applies, in order, event
filtering, sliding-window rate limiting, retry with capped exponential
backoff (each attempt bounded by the configured timeout), and statistics
bookkeeping. The channel itself only performs the protocol call.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from status_notifier.notifications.base.filters import filter_reason
from status_notifier.notifications.base.rate_limit import SlidingWindowRateLimiter
from status_notifier.notifications.base.retry import Sleeper, run_with_retry
from status_notifier.types.models import (
    ErrorCode,
    NotificationContext,
    NotificationEvent,
    NotificationResult,
    NotificationStats,
    failure,
    skipped,
)
from status_notifier.types.protocols import Channel, ClosableChannel
from status_notifier.utils.sanitization import sanitize_exception

if TYPE_CHECKING:
    from status_notifier.config.models.providers import ProviderConfig


class NotificationProvider:
    """Filter, rate-limit, retry and measure deliveries through one channel."""

    def __init__(
        self,
        config: ProviderConfig,
        channel: Channel,
        *,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialize the provider pipeline.

        Args:
            config: Validated provider configuration
            channel: Channel performing the actual delivery
            logger: Logger for this provider instance
            clock: Monotonic time source in seconds
            sleep: Awaitable sleep used between retry attempts
        """
        self._config: ProviderConfig = config
        self._channel: Channel = channel
        self._logger: logging.Logger = logger or logging.getLogger(__name__)
        self._clock: Callable[[], float] = clock
        self._sleep: Sleeper = sleep
        self._enabled: bool = config.enabled
        self._rate_limiter: SlidingWindowRateLimiter = SlidingWindowRateLimiter(
            config.rate_limit.max_notifications,
            config.rate_limit.period_ms / 1000.0,
            clock=clock,
        )
        self._stats: NotificationStats = self._fresh_stats()

    def _fresh_stats(self) -> NotificationStats:
        return NotificationStats(provider_id=self._config.id, provider_type=self._config.type)

    @property
    def id(self) -> str:
        """Provider instance id."""
        return self._config.id

    @property
    def type(self) -> str:
        """Provider type name."""
        return self._config.type

    @property
    def config(self) -> ProviderConfig:
        """Validated configuration."""
        return self._config

    @property
    def channel(self) -> Channel:
        """Wrapped channel."""
        return self._channel

    def should_handle(self, event: NotificationEvent) -> bool:
        """Return True if this provider is enabled and its filters accept ``event``."""
        if not self._enabled:
            return False
        reason = filter_reason(self._config, event)
        if reason is not None:
            self._logger.debug("Provider %s skips %s: %s", self.id, event.kind, reason)
            return False
        return True

    async def _attempt(self, context: NotificationContext) -> NotificationResult[object]:
        timeout_s = self._config.timeout_ms / 1000.0
        try:
            async with asyncio.timeout(timeout_s):
                return await self._channel.send_notification(context)
        except TimeoutError:
            return failure(
                ErrorCode.TIMEOUT,
                f"Delivery timed out after {self._config.timeout_ms}ms",
                self.id,
                retryable=True,
            )
        except Exception as exc:
            self._logger.error(
                "Provider %s raised during delivery: %s", self.id, sanitize_exception(exc)
            )
            return failure(
                ErrorCode.INTERNAL_ERROR,
                sanitize_exception(exc),
                self.id,
                retryable=False,
                cause=exc,
            )

    async def send(self, context: NotificationContext) -> NotificationResult[object]:
        """Deliver ``context`` through the pipeline.

        Args:
            context: Event plus shared metadata

        Returns:
            ``skipped()`` when filtered out, a non-retryable
            ``RATE_LIMIT_EXCEEDED`` failure when over the limit, otherwise
            the final channel result after retries
        """
        if not self.should_handle(context.event):
            return skipped()

        if not self._rate_limiter.try_acquire():
            self._stats.rate_limit_hits += 1
            self._logger.warning(
                "Provider %s rate limit exceeded (%d per %dms)",
                self.id,
                self._config.rate_limit.max_notifications,
                self._config.rate_limit.period_ms,
            )
            return failure(
                ErrorCode.RATE_LIMIT_EXCEEDED,
                (
                    f"Rate limit of {self._config.rate_limit.max_notifications} notifications "
                    f"per {self._config.rate_limit.period_ms}ms exceeded"
                ),
                self.id,
                retryable=False,
            )

        started = self._clock()
        result, attempts = await run_with_retry(
            lambda: self._attempt(context),
            self._config.retry,
            sleep=self._sleep,
            log=self._logger,
            label=f"Provider {self.id}",
        )
        latency_ms = (self._clock() - started) * 1000.0
        self._stats.record(result.success, latency_ms)

        if result.success:
            self._logger.info(
                "Provider %s delivered %s in %.1fms (attempts=%d)",
                self.id,
                context.event.kind,
                latency_ms,
                attempts,
            )
        else:
            self._logger.warning(
                "Provider %s failed to deliver %s after %d attempt(s)",
                self.id,
                context.event.kind,
                attempts,
            )
        return result

    async def validate(self) -> NotificationResult[None]:
        """Check identity fields and let the channel validate its configuration."""
        if not self._config.id:
            return failure(ErrorCode.VALIDATION_ERROR, "Provider id is required", "<unknown>")
        if not self._config.type:
            return failure(ErrorCode.VALIDATION_ERROR, "Provider type is required", self.id)
        try:
            return await self._channel.validate_provider_config()
        except Exception as exc:
            return failure(
                ErrorCode.VALIDATION_ERROR,
                f"Configuration validation raised: {sanitize_exception(exc)}",
                self.id,
                cause=exc,
            )

    def get_stats(self) -> NotificationStats:
        """Return a snapshot of the delivery statistics."""
        return self._stats.snapshot()

    def reset_stats(self) -> None:
        """Zero every counter."""
        self._stats = self._fresh_stats()

    def enable(self) -> None:
        """Resume accepting events."""
        self._enabled = True

    def disable(self) -> None:
        """Stop accepting events; sends return ``skipped()``."""
        self._enabled = False

    def is_enabled(self) -> bool:
        """Check if the provider is enabled."""
        return self._enabled

    async def aclose(self) -> None:
        """Release channel resources, if the channel holds any."""
        if isinstance(self._channel, ClosableChannel):
            await self._channel.aclose()
