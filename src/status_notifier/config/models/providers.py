"""Provider-specific configuration models.

Each built-in channel type has its own model extending
``BaseProviderConfig``; the literal ``type`` field acts as the union tag.
Types registered at runtime without a model of their own validate against
``CustomProviderConfig``, which accepts arbitrary extra keys.
"""

from __future__ import annotations

import re
from typing import Annotated, Final, Literal

from pydantic import AliasChoices, ConfigDict, EmailStr, Field, field_validator, model_validator

from status_notifier.config.models.base import BaseConfig, BaseProviderConfig
from status_notifier.config.secrets import (
    PlainUrl,
    SecretHttpsUrl,
    SecretUrl,
    SecretValue,
)

_HEX_COLOR_PATTERN: Final[re.Pattern[str]] = re.compile(r"^#[0-9A-Fa-f]{6}$")


class MentionTargets(BaseConfig):
    """User or role ids to mention for high-severity events."""

    critical: list[str] = Field(default_factory=list)
    major: list[str] = Field(default_factory=list)


class SlackProviderConfig(BaseProviderConfig):
    """Slack incoming-webhook channel."""

    type: Literal["slack"] = "slack"  # pyright: ignore[reportIncompatibleVariableOverride]
    webhook_url: SecretHttpsUrl
    channel: str | None = None
    username: str | None = None
    icon_emoji: str | None = None
    mention_users: MentionTargets = Field(default_factory=MentionTargets)


class SmtpAuth(BaseConfig):
    """SMTP login credentials."""

    user: SecretValue
    password: SecretValue = Field(validation_alias=AliasChoices("password", "pass"))


class SmtpSettings(BaseConfig):
    """SMTP server connection settings."""

    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    secure: bool = Field(default=False, description="Use implicit TLS (SMTPS)")
    starttls: bool = Field(default=False, description="Upgrade a plain connection with STARTTLS")
    auth: SmtpAuth | None = None

    @model_validator(mode="after")
    def _check_tls_mode(self) -> SmtpSettings:
        if self.secure and self.starttls:
            msg = "secure and starttls are mutually exclusive"
            raise ValueError(msg)
        return self


class EmailProviderConfig(BaseProviderConfig):
    """E-mail channel delivering through an SMTP server."""

    type: Literal["email"] = "email"  # pyright: ignore[reportIncompatibleVariableOverride]
    smtp: SmtpSettings
    from_address: EmailStr = Field(alias="from")
    to: list[EmailStr] = Field(min_length=1)
    cc: list[EmailStr] = Field(default_factory=list)
    bcc: list[EmailStr] = Field(default_factory=list)
    subject_prefix: str = "[Status]"
    probe_on_validate: bool = Field(
        default=False,
        description="Open an SMTP connection when the provider is validated",
    )


class BearerAuth(BaseConfig):
    """``Authorization: Bearer <token>``."""

    type: Literal["bearer"]
    token: SecretValue


class BasicAuth(BaseConfig):
    """HTTP basic authentication."""

    type: Literal["basic"]
    username: SecretValue
    password: SecretValue


class ApiKeyAuth(BaseConfig):
    """API key sent in a custom header."""

    type: Literal["api-key"]
    token: SecretValue
    header_name: str = Field(min_length=1)


WebhookAuth = Annotated[BearerAuth | BasicAuth | ApiKeyAuth, Field(discriminator="type")]


class WebhookProviderConfig(BaseProviderConfig):
    """Generic JSON webhook channel."""

    type: Literal["webhook"] = "webhook"  # pyright: ignore[reportIncompatibleVariableOverride]
    url: SecretUrl
    method: Literal["POST", "PUT", "PATCH"] = "POST"
    headers: dict[str, str] = Field(default_factory=dict)
    authentication: WebhookAuth | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class DiscordProviderConfig(BaseProviderConfig):
    """Discord webhook channel."""

    type: Literal["discord"] = "discord"  # pyright: ignore[reportIncompatibleVariableOverride]
    webhook_url: SecretHttpsUrl
    username: str | None = Field(default=None, max_length=80)
    avatar_url: PlainUrl | None = None
    mention_roles: MentionTargets = Field(default_factory=MentionTargets)


class PagerDutySeverityMap(BaseConfig):
    """Mapping from incident severity to PagerDuty event severity."""

    critical: Literal["critical", "error"] = "critical"
    major: Literal["warning", "error"] = "error"
    minor: Literal["warning", "info"] = "warning"


class PagerDutyProviderConfig(BaseProviderConfig):
    """PagerDuty Events API v2 channel."""

    type: Literal["pagerduty"] = "pagerduty"  # pyright: ignore[reportIncompatibleVariableOverride]
    integration_key: SecretValue
    api_key: SecretValue | None = None
    routing_key: SecretValue | None = None
    severity: PagerDutySeverityMap = Field(default_factory=PagerDutySeverityMap)
    events_url: PlainUrl = "https://events.pagerduty.com/v2/enqueue"


class TeamsThemeColors(BaseConfig):
    """Card accent colors per event category."""

    critical: str = "#D13438"
    major: str = "#FF8C00"
    minor: str = "#FFB900"
    maintenance: str = "#0078D4"

    @field_validator("critical", "major", "minor", "maintenance")
    @classmethod
    def _check_hex(cls, value: str) -> str:
        if not _HEX_COLOR_PATTERN.match(value):
            msg = "Color must be in #RRGGBB format"
            raise ValueError(msg)
        return value.upper()


class MSTeamsProviderConfig(BaseProviderConfig):
    """Microsoft Teams incoming-webhook channel."""

    type: Literal["msteams"] = "msteams"  # pyright: ignore[reportIncompatibleVariableOverride]
    webhook_url: SecretHttpsUrl
    theme_color: TeamsThemeColors = Field(default_factory=TeamsThemeColors)


class CustomProviderConfig(BaseProviderConfig):
    """Configuration for user-registered types without a dedicated model.

    Keys beyond the shared base fields are kept as extra attributes and are
    available through ``model_extra``.
    """

    model_config: ConfigDict = ConfigDict(extra="allow")  # pyright: ignore[reportIncompatibleVariableOverride]

    def option(self, key: str, default: object = None) -> object:
        """Return a type-specific extra option."""
        extra = self.model_extra or {}
        return extra.get(key, default)


type ProviderConfig = (
    SlackProviderConfig
    | EmailProviderConfig
    | WebhookProviderConfig
    | DiscordProviderConfig
    | PagerDutyProviderConfig
    | MSTeamsProviderConfig
    | CustomProviderConfig
    | BaseProviderConfig
)

BUILTIN_CONFIG_MODELS: Final[dict[str, type[BaseProviderConfig]]] = {
    "slack": SlackProviderConfig,
    "email": EmailProviderConfig,
    "webhook": WebhookProviderConfig,
    "discord": DiscordProviderConfig,
    "pagerduty": PagerDutyProviderConfig,
    "msteams": MSTeamsProviderConfig,
}
