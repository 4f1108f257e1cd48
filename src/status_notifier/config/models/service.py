"""Notification service settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from status_notifier.config.models.base import BaseConfig
from status_notifier.types.models import ContextDefaults


class DefaultContextConfig(BaseConfig):
    """Shared context fields applied to every notification."""

    status_page_url: str | None = None
    organization_name: str | None = None
    environment: str | None = None
    metadata: dict[str, object] = Field(default_factory=dict)

    def to_defaults(self) -> ContextDefaults:
        """Convert into the runtime ``ContextDefaults`` value."""
        return ContextDefaults(
            status_page_url=self.status_page_url,
            organization_name=self.organization_name,
            environment=self.environment,
            metadata=dict(self.metadata),
        )


class NotificationServiceConfig(BaseConfig):
    """Settings controlling provider loading and fan-out."""

    loading_strategy: Literal["lazy", "eager"] = Field(
        default="lazy",
        description="Load providers on first use or all at initialize()",
    )
    max_concurrency: int = Field(
        default=5,
        ge=1,
        description="Maximum providers dispatched concurrently per chunk",
    )
    continue_on_error: bool = Field(
        default=True,
        description="Keep dispatching later chunks after a failure",
    )
    default_context: DefaultContextConfig = Field(default_factory=DefaultContextConfig)
    providers: list[dict[str, object]] = Field(
        default_factory=list,
        description="Raw provider entries, validated by ConfigValidator",
    )
