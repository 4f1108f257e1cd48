"""Pydantic configuration models."""

from status_notifier.config.models.base import (
    BaseConfig,
    BaseProviderConfig,
    RateLimitPolicy,
    RetryPolicy,
)
from status_notifier.config.models.providers import (
    BUILTIN_CONFIG_MODELS,
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    CustomProviderConfig,
    DiscordProviderConfig,
    EmailProviderConfig,
    MentionTargets,
    MSTeamsProviderConfig,
    PagerDutyProviderConfig,
    PagerDutySeverityMap,
    ProviderConfig,
    SlackProviderConfig,
    SmtpAuth,
    SmtpSettings,
    TeamsThemeColors,
    WebhookProviderConfig,
)
from status_notifier.config.models.service import NotificationServiceConfig

__all__ = [
    "BUILTIN_CONFIG_MODELS",
    "ApiKeyAuth",
    "BaseConfig",
    "BaseProviderConfig",
    "BasicAuth",
    "BearerAuth",
    "CustomProviderConfig",
    "DiscordProviderConfig",
    "EmailProviderConfig",
    "MSTeamsProviderConfig",
    "MentionTargets",
    "NotificationServiceConfig",
    "PagerDutyProviderConfig",
    "PagerDutySeverityMap",
    "ProviderConfig",
    "RateLimitPolicy",
    "RetryPolicy",
    "SlackProviderConfig",
    "SmtpAuth",
    "SmtpSettings",
    "TeamsThemeColors",
    "WebhookProviderConfig",
]
