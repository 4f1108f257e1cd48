"""YAML settings loader."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from status_notifier.config.exceptions import ConfigLoadError, ConfigValidationError
from status_notifier.config.models.service import NotificationServiceConfig

logger = logging.getLogger(__name__)


class YamlLoader:
    """Loader for YAML configuration files."""

    def load(self, path: Path) -> dict[str, object]:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Parsed configuration as a dictionary; empty files yield ``{}``

        Raises:
            ConfigLoadError: If the file cannot be read or parsed, or its
                top level is not a mapping
        """
        try:
            with open(path, encoding="utf-8") as f:
                content = yaml.safe_load(f)  # pyright: ignore[reportAny]
        except (OSError, yaml.YAMLError) as e:
            msg = f"Failed to load {path}: {e}"
            raise ConfigLoadError(msg, file_path=str(path)) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            msg = f"Top level of {path} must be a mapping"
            raise ConfigLoadError(msg, file_path=str(path))
        return content  # pyright: ignore[reportUnknownVariableType]


def load_service_config(path: Path | str) -> NotificationServiceConfig:
    """Read notification service settings from a YAML file.

    Provider entries are kept raw; they are validated later by
    ``ConfigValidator`` so that ``env:`` references resolve against the
    environment of the process that builds the service.

    Args:
        path: Settings file path

    Returns:
        Parsed service settings

    Raises:
        ConfigLoadError: If the file cannot be read or parsed
        ConfigValidationError: If the top-level settings are invalid
    """
    file_path = Path(path)
    data = YamlLoader().load(file_path)
    try:
        settings = NotificationServiceConfig.model_validate(data)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        msg = f"Invalid notification settings in {file_path}: {details}"
        raise ConfigValidationError(msg, context={"file_path": str(file_path)}) from exc

    logger.debug(
        "Loaded notification settings from %s (%d provider entries)",
        file_path,
        len(settings.providers),
    )
    return settings
