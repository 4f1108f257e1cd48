"""Base configuration models and common types."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from status_notifier.types.models import EventKind, Severity


class BaseConfig(BaseModel):
    """Base configuration model with common settings.

    Keys are accepted either by field name (snake_case) or by their
    camelCase alias; unknown keys are rejected.
    """

    model_config: ConfigDict = ConfigDict(  # pyright: ignore[reportIncompatibleVariableOverride]
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
        frozen=False,
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
        loc_by_alias=False,
    )


class RetryPolicy(BaseConfig):
    """Retry behavior for retryable delivery failures."""

    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum number of channel invocations per send",
    )
    initial_delay_ms: int = Field(
        default=1000,
        ge=0,
        description="Delay before the second attempt in milliseconds",
    )
    backoff_multiplier: float = Field(
        default=2.0,
        ge=1.0,
        description="Factor applied to the delay after every failed attempt",
    )
    max_delay_ms: int = Field(
        default=30000,
        ge=0,
        description="Upper bound for a single backoff delay in milliseconds",
    )

    def delay_ms(self, attempt: int) -> float:
        """Return the delay to wait after ``attempt`` failed (1-based).

        Args:
            attempt: Number of the attempt that just failed

        Returns:
            ``min(initial_delay_ms * backoff_multiplier ** (attempt - 1), max_delay_ms)``
        """
        if attempt < 1:
            msg = "attempt must be >= 1"
            raise ValueError(msg)
        raw = self.initial_delay_ms * self.backoff_multiplier ** (attempt - 1)
        return float(min(raw, self.max_delay_ms))


class RateLimitPolicy(BaseConfig):
    """Sliding-window limit on accepted sends."""

    max_notifications: int = Field(
        default=60,
        ge=1,
        description="Maximum accepted sends inside one window",
    )
    period_ms: int = Field(
        default=60000,
        ge=1,
        description="Window length in milliseconds",
    )


class BaseProviderConfig(BaseConfig):
    """Fields shared by every provider configuration."""

    id: str = Field(min_length=1, description="Unique provider identifier")
    type: str = Field(min_length=1, description="Registered provider type")
    name: str | None = Field(default=None, description="Display name")
    enabled: bool = True
    event_filter: list[EventKind] = Field(
        default_factory=list,
        description="Event kinds to deliver; empty means all",
    )
    entity_filter: list[str] = Field(
        default_factory=list,
        description="Entities of interest; empty means all",
    )
    min_severity: Severity = Severity.MINOR
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    rate_limit: RateLimitPolicy = Field(default_factory=RateLimitPolicy)
    timeout_ms: int = Field(
        default=10000,
        ge=100,
        le=120000,
        description="Per-attempt I/O timeout in milliseconds",
    )

    @model_validator(mode="after")
    def _check_retry_bounds(self) -> BaseProviderConfig:
        if self.retry.max_delay_ms < self.retry.initial_delay_ms:
            msg = "retry.max_delay_ms must be >= retry.initial_delay_ms"
            raise ValueError(msg)
        return self

    @property
    def display_name(self) -> str:
        """Name used in log lines and message footers."""
        return self.name or self.id
