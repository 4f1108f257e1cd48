"""Status Notifier - fan-out of status page events to notification channels.

Typical use::

    async with await create_notification_service(settings) as service:
        results = await service.notify(event)
"""

from status_notifier.config import ConfigValidationError, ConfigValidator
from status_notifier.config.models import NotificationServiceConfig
from status_notifier.exceptions import (
    DuplicateProviderError,
    NotificationServiceError,
    ProviderLoadError,
    ProviderRegistryError,
    StatusNotifierError,
)
from status_notifier.notifications import (
    NotificationProvider,
    NotificationService,
    ProviderRegistry,
    create_notification_service,
    get_default_registry,
)
from status_notifier.types import (
    ErrorCode,
    EventKind,
    NotificationContext,
    NotificationError,
    NotificationResult,
    Severity,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigValidationError",
    "ConfigValidator",
    "DuplicateProviderError",
    "ErrorCode",
    "EventKind",
    "NotificationContext",
    "NotificationError",
    "NotificationProvider",
    "NotificationResult",
    "NotificationService",
    "NotificationServiceConfig",
    "NotificationServiceError",
    "ProviderLoadError",
    "ProviderRegistry",
    "ProviderRegistryError",
    "Severity",
    "StatusNotifierError",
    "__version__",
    "create_notification_service",
    "get_default_registry",
]
