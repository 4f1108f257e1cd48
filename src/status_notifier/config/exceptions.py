"""Error types for the configuration system."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from status_notifier.config.validator import IndexedConfigError

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Base exception for all configuration-related errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:  # pyright: ignore[reportExplicitAny]
        """Initialize ConfigError.

        Args:
            message: Error message
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.context: dict[str, Any] = context or {}  # pyright: ignore[reportExplicitAny]


class ConfigLoadError(ConfigError):
    """Exception raised when a settings file cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        context: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
    ) -> None:
        """Initialize ConfigLoadError.

        Args:
            message: Error message
            file_path: Path to the configuration file that failed to load
            context: Additional context information
        """
        full_context = context or {}
        if file_path is not None:
            full_context["file_path"] = file_path

        super().__init__(message, full_context)
        self.file_path: str | None = file_path


class ConfigValidationError(ConfigError):
    """Exception raised when provider configurations fail validation."""

    def __init__(
        self,
        message: str,
        errors: Sequence[IndexedConfigError] = (),
        context: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error message
            errors: Every per-entry validation error
            context: Additional context information
        """
        full_context = context or {}
        if errors:
            full_context["validation_errors"] = [
                {"index": err.index, "message": err.error.message} for err in errors
            ]

        super().__init__(message, full_context)
        self.errors: list[IndexedConfigError] = list(errors)


def log_config_error(error: ConfigError, level: int = logging.WARNING) -> None:
    """Log configuration error with its context.

    Args:
        error: Configuration error to log
        level: Logging level (default: WARNING)
    """
    message = str(error)
    if error.context:
        context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())  # pyright: ignore[reportAny]
        message = f"{message} (context: {context_str})"

    logger.log(level, message)
