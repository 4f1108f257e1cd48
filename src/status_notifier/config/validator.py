"""Configuration validation for notification providers.

``ConfigValidator`` turns raw provider mappings (parsed YAML, JSON, or
dictionaries built in code) into typed ``ProviderConfig`` models. It never
raises for bad input: problems come back as ``NotificationFailure`` values
carrying a ``CONFIGURATION_ERROR`` and a list of ``ConfigIssue`` records.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Literal, override

from pydantic import ValidationError

from status_notifier.config.exceptions import ConfigValidationError
from status_notifier.config.models.providers import (
    BUILTIN_CONFIG_MODELS,
    CustomProviderConfig,
    ProviderConfig,
)
from status_notifier.types.models import (
    ErrorCode,
    NotificationError,
    NotificationFailure,
    NotificationResult,
    NotificationSuccess,
    failure,
    success,
)

if TYPE_CHECKING:
    from status_notifier.config.models.base import BaseProviderConfig
    from status_notifier.notifications.registry import ProviderRegistry

logger = logging.getLogger(__name__)

_ROOT_FIELD = "<root>"
_UNKNOWN_ID = "<unknown>"


@dataclass(slots=True, frozen=True)
class ConfigIssue:
    """One problem found in a provider configuration."""

    field: str
    message: str
    code: str

    @override
    def __str__(self) -> str:
        """Render as ``field: message``."""
        return f"{self.field}: {self.message}"


@dataclass(slots=True, frozen=True)
class IndexedConfigError:
    """Validation failure for the entry at ``index`` of a batch."""

    index: int
    error: NotificationError
    issues: tuple[ConfigIssue, ...]


@dataclass(slots=True, frozen=True)
class ConfigBatchFailure:
    """Failed batch validation listing every invalid entry."""

    success: ClassVar[Literal[False]] = False

    errors: list[IndexedConfigError]


def _issues_from_pydantic(exc: ValidationError) -> list[ConfigIssue]:
    issues: list[ConfigIssue] = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or _ROOT_FIELD
        issues.append(ConfigIssue(field=field, message=err["msg"], code=err["type"]))
    return issues


class ConfigValidator:
    """Validate raw provider configurations into typed models.

    Args:
        registry: Registry consulted for type-specific models. When given,
            types it does not know are rejected.
        environ: Mapping used to resolve ``env:NAME`` references
            (defaults to ``os.environ``)
    """

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._registry: ProviderRegistry | None = registry
        self._environ: Mapping[str, str] = environ if environ is not None else os.environ

    def _model_for(self, provider_type: str) -> type[BaseProviderConfig] | ConfigIssue:
        if self._registry is not None:
            if provider_type not in self._registry:
                available = ", ".join(sorted(self._registry.types()))
                return ConfigIssue(
                    field="type",
                    message=(
                        f"Unknown provider type '{provider_type}'. Available types: {available}"
                    ),
                    code="unknown_type",
                )
            model = self._registry.config_model_for(provider_type)
            if model is not None:
                return model
        return BUILTIN_CONFIG_MODELS.get(provider_type, CustomProviderConfig)

    def _failure(self, provider_id: str, issues: Sequence[ConfigIssue]) -> NotificationFailure:
        summary = "; ".join(str(issue) for issue in issues)
        return failure(
            ErrorCode.CONFIGURATION_ERROR,
            f"Invalid configuration for provider '{provider_id}': {summary}",
            provider_id,
            retryable=False,
            cause=tuple(issues),
        )

    def _collect(self, raw: object) -> tuple[str, ProviderConfig | list[ConfigIssue]]:
        if not isinstance(raw, Mapping):
            issue = ConfigIssue(
                field=_ROOT_FIELD,
                message="Provider configuration must be a mapping",
                code="mapping_type",
            )
            return _UNKNOWN_ID, [issue]

        data: Mapping[str, object] = raw  # pyright: ignore[reportUnknownVariableType]
        raw_id = data.get("id")
        provider_id = raw_id if isinstance(raw_id, str) and raw_id.strip() else _UNKNOWN_ID

        provider_type = data.get("type")
        if not isinstance(provider_type, str) or not provider_type.strip():
            issue = ConfigIssue(field="type", message="Provider type is required", code="missing")
            return provider_id, [issue]

        model = self._model_for(provider_type.strip())
        if isinstance(model, ConfigIssue):
            return provider_id, [model]

        try:
            config = model.model_validate(dict(data), context={"environ": self._environ})
        except ValidationError as exc:
            return provider_id, _issues_from_pydantic(exc)
        return provider_id, config

    def validate(self, raw: object) -> NotificationResult[ProviderConfig]:
        """Validate one raw provider configuration.

        Args:
            raw: Mapping with at least ``id`` and ``type``

        Returns:
            Typed configuration with defaults applied, or a
            ``CONFIGURATION_ERROR`` failure listing every issue
        """
        provider_id, outcome = self._collect(raw)
        if isinstance(outcome, list):
            result = self._failure(provider_id, outcome)
            logger.debug("Provider config rejected: %s", result.error.message)
            return result
        return success(outcome)

    def _validate_indexed(
        self, index: int, raw: object
    ) -> ProviderConfig | IndexedConfigError:
        provider_id, outcome = self._collect(raw)
        if isinstance(outcome, list):
            return IndexedConfigError(
                index=index,
                error=self._failure(provider_id, outcome).error,
                issues=tuple(outcome),
            )
        return outcome

    def validate_many(
        self, raws: Sequence[object]
    ) -> NotificationSuccess[list[ProviderConfig]] | ConfigBatchFailure:
        """Validate a list of raw configurations.

        Every entry is checked; no entry is dropped. Ids repeated inside the
        batch are reported on the later entries.

        Args:
            raws: Raw provider configurations

        Returns:
            All typed configurations in input order, or every indexed error
        """
        configs: list[ProviderConfig] = []
        errors: list[IndexedConfigError] = []
        first_seen: dict[str, int] = {}

        for index, raw in enumerate(raws):
            outcome = self._validate_indexed(index, raw)
            if isinstance(outcome, IndexedConfigError):
                errors.append(outcome)
                continue

            if outcome.id in first_seen:
                issue = ConfigIssue(
                    field="id",
                    message=(
                        f"Duplicate provider id '{outcome.id}' "
                        f"(first defined at index {first_seen[outcome.id]})"
                    ),
                    code="duplicate_id",
                )
                errors.append(
                    IndexedConfigError(
                        index=index,
                        error=self._failure(outcome.id, [issue]).error,
                        issues=(issue,),
                    )
                )
                continue

            first_seen[outcome.id] = index
            configs.append(outcome)

        if errors:
            logger.warning(
                "%d of %d provider configuration(s) failed validation", len(errors), len(raws)
            )
            return ConfigBatchFailure(errors=errors)
        return success(configs)

    def ensure_valid(self, raws: Sequence[object]) -> list[ProviderConfig]:
        """Validate a batch and raise if any entry is invalid.

        Raises:
            ConfigValidationError: Carrying every indexed error
        """
        result = self.validate_many(raws)
        if isinstance(result, ConfigBatchFailure):
            lines = [f"[{err.index}] {err.error.message}" for err in result.errors]
            message = f"{len(result.errors)} invalid provider configuration(s): " + " | ".join(
                lines
            )
            raise ConfigValidationError(message, errors=result.errors)
        return result.data


def validate_provider_config(
    raw: object, *, environ: Mapping[str, str] | None = None
) -> NotificationResult[ProviderConfig]:
    """Validate one configuration against the built-in models."""
    return ConfigValidator(environ=environ).validate(raw)


def validate_provider_configs(
    raws: Sequence[object], *, environ: Mapping[str, str] | None = None
) -> NotificationSuccess[list[ProviderConfig]] | ConfigBatchFailure:
    """Validate a batch of configurations against the built-in models."""
    return ConfigValidator(environ=environ).validate_many(raws)
