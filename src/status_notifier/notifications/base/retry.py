"""Retry with capped exponential backoff for result-returning operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from typing import TYPE_CHECKING

from status_notifier.types.models import NotificationFailure, NotificationResult

if TYPE_CHECKING:
    from status_notifier.config.models.base import RetryPolicy

logger = logging.getLogger(__name__)

type Sleeper = Callable[[float], Awaitable[None]]


def backoff_delays(policy: RetryPolicy) -> Iterator[float]:
    """Yield the delays in milliseconds between consecutive attempts.

    For ``max_attempts`` attempts there are ``max_attempts - 1`` delays.

    Example:
        >>> list(backoff_delays(RetryPolicy(max_attempts=4, initial_delay_ms=100)))
        [100.0, 200.0, 400.0]
    """
    for attempt in range(1, policy.max_attempts):
        yield policy.delay_ms(attempt)


async def run_with_retry[T](
    operation: Callable[[], Awaitable[NotificationResult[T]]],
    policy: RetryPolicy,
    *,
    sleep: Sleeper = asyncio.sleep,
    log: logging.Logger = logger,
    label: str = "operation",
) -> tuple[NotificationResult[T], int]:
    """Invoke ``operation`` until it succeeds or a non-retryable failure occurs.

    Args:
        operation: Zero-argument coroutine factory producing a result
        policy: Attempt limit and backoff parameters
        sleep: Awaitable sleep taking seconds (injectable for tests)
        log: Logger receiving retry messages
        label: Name used in log messages

    Returns:
        The last result and the number of attempts made
    """
    attempt = 0
    while True:
        attempt += 1
        result = await operation()

        if not isinstance(result, NotificationFailure):
            return result, attempt
        if not result.error.retryable:
            return result, attempt
        if attempt >= policy.max_attempts:
            log.warning(
                "%s failed after %d attempt(s): [%s] %s",
                label,
                attempt,
                result.error.code,
                result.error.message,
            )
            return result, attempt

        delay_ms = policy.delay_ms(attempt)
        log.info(
            "%s attempt %d/%d failed with %s, retrying in %.0fms",
            label,
            attempt,
            policy.max_attempts,
            result.error.code,
            delay_ms,
        )
        await sleep(delay_ms / 1000.0)
