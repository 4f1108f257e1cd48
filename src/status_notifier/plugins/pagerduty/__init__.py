"""PagerDuty Events API channel."""
