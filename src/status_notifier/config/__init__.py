"""Configuration models, validation and loading."""

from status_notifier.config.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)
from status_notifier.config.loader import YamlLoader, load_service_config
from status_notifier.config.validator import (
    ConfigBatchFailure,
    ConfigIssue,
    ConfigValidator,
    IndexedConfigError,
    validate_provider_config,
    validate_provider_configs,
)

__all__ = [
    "ConfigBatchFailure",
    "ConfigError",
    "ConfigIssue",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidator",
    "IndexedConfigError",
    "YamlLoader",
    "load_service_config",
    "validate_provider_config",
    "validate_provider_configs",
]
