"""Resolution of ``env:NAME`` secret references.

Secret-bearing configuration fields may hold either a literal value or a
reference of the form ``env:NAME``. References are resolved while the
configuration is validated, against the environment mapping passed in the
pydantic validation context under the ``"environ"`` key (``os.environ``
when no context is given).
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Annotated, Final
from urllib.parse import urlparse

from pydantic import AfterValidator, BeforeValidator, StringConstraints, ValidationInfo

from status_notifier.utils.sanitization import register_secret

ENV_PREFIX: Final[str] = "env:"

_ENV_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_env_reference(value: object) -> bool:
    """Return True if ``value`` is an ``env:`` reference."""
    return isinstance(value, str) and value.strip().startswith(ENV_PREFIX)


def resolve_env_reference(value: str, environ: Mapping[str, str]) -> str:
    """Resolve a single ``env:NAME`` reference.

    Args:
        value: Reference string including the ``env:`` prefix
        environ: Environment mapping to look the variable up in

    Returns:
        The variable's value

    Raises:
        ValueError: If the reference is malformed or the variable is unset or empty
    """
    name = value.strip()[len(ENV_PREFIX) :].strip()
    if not name:
        msg = "Environment reference 'env:' is missing a variable name"
        raise ValueError(msg)
    if not _ENV_NAME_PATTERN.match(name):
        msg = f"Invalid environment variable name '{name}'"
        raise ValueError(msg)
    resolved = environ.get(name)
    if resolved is None or not resolved.strip():
        msg = f"Environment variable '{name}' is not set or empty"
        raise ValueError(msg)
    return resolved.strip()


def _environ_from(info: ValidationInfo) -> Mapping[str, str]:
    context = info.context
    if isinstance(context, Mapping):
        environ = context.get("environ")  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
        if isinstance(environ, Mapping):
            return environ  # pyright: ignore[reportUnknownVariableType]
    return os.environ


def resolve_secret(value: object, info: ValidationInfo) -> object:
    """Pydantic before-validator resolving ``env:`` references.

    Literal values pass through unchanged. Every resulting string is
    registered with the sanitization layer so it never reaches the logs.
    """
    if not isinstance(value, str):
        return value
    resolved = (
        resolve_env_reference(value, _environ_from(info)) if is_env_reference(value) else value
    )
    register_secret(resolved.strip())
    return resolved


def require_url(value: str) -> str:
    """Ensure ``value`` is an absolute http(s) URL."""
    parsed = urlparse(value)
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
        msg = "Value must be an absolute http(s) URL"
        raise ValueError(msg)
    return value


def require_https_url(value: str) -> str:
    """Ensure ``value`` is an absolute HTTPS URL."""
    _ = require_url(value)
    if urlparse(value).scheme.lower() != "https":
        msg = "Webhook URL must use HTTPS"
        raise ValueError(msg)
    return value


# Non-empty secret, literal or ``env:NAME``
SecretValue = Annotated[str, BeforeValidator(resolve_secret), StringConstraints(min_length=1)]

# Absolute http(s) URL, literal or ``env:NAME``
SecretUrl = Annotated[str, BeforeValidator(resolve_secret), AfterValidator(require_url)]

# Absolute HTTPS URL, literal or ``env:NAME``
SecretHttpsUrl = Annotated[str, BeforeValidator(resolve_secret), AfterValidator(require_https_url)]

# Absolute http(s) URL that is not treated as a secret
PlainUrl = Annotated[str, AfterValidator(require_url)]
