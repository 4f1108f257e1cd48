"""Provider pipeline building blocks."""

from status_notifier.notifications.base.filters import accepts, filter_reason
from status_notifier.notifications.base.provider import NotificationProvider
from status_notifier.notifications.base.rate_limit import SlidingWindowRateLimiter
from status_notifier.notifications.base.retry import backoff_delays, run_with_retry

__all__ = [
    "NotificationProvider",
    "SlidingWindowRateLimiter",
    "accepts",
    "backoff_delays",
    "filter_reason",
    "run_with_retry",
]
