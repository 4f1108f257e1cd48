"""Provider registry, delivery pipeline and notification service."""

from status_notifier.notifications.base.provider import NotificationProvider
from status_notifier.notifications.registry import (
    ProviderRegistry,
    ProviderRegistryEntry,
    get_default_registry,
)
from status_notifier.notifications.service import (
    NotificationService,
    create_notification_service,
)

__all__ = [
    "NotificationProvider",
    "NotificationService",
    "ProviderRegistry",
    "ProviderRegistryEntry",
    "create_notification_service",
    "get_default_registry",
]
