"""Exceptions raised for API misuse and registry failures.

Delivery problems never surface as exceptions; they are returned as
``NotificationFailure`` values. The classes here cover the remaining cases
where the caller did something that cannot be expressed as a result.
"""

from __future__ import annotations


class StatusNotifierError(Exception):
    """Base exception for all status-notifier errors."""


class NotificationServiceError(StatusNotifierError):
    """Raised when the notification service is used incorrectly."""


class DuplicateProviderError(NotificationServiceError):
    """Raised when two provider configurations share the same id."""

    def __init__(self, provider_ids: list[str]) -> None:
        """Initialize with the offending ids.

        Args:
            provider_ids: Every id that appears more than once
        """
        joined = ", ".join(provider_ids)
        super().__init__(f"Duplicate provider ids: {joined}")
        self.provider_ids: list[str] = provider_ids


class ProviderRegistryError(StatusNotifierError):
    """Exception raised by the provider registry."""


class ProviderLoadError(ProviderRegistryError):
    """Raised when a provider type cannot be loaded or instantiated."""

    def __init__(
        self,
        message: str,
        *,
        provider_type: str,
        provider_id: str | None = None,
    ) -> None:
        """Initialize ProviderLoadError.

        Args:
            message: Error message
            provider_type: Provider type that failed
            provider_id: Provider instance id, when the failure is per instance
        """
        super().__init__(message)
        self.provider_type: str = provider_type
        self.provider_id: str | None = provider_id
