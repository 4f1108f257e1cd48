"""Provider registry with deferred loading of channel constructors.

A registry maps provider type names to loaders. A loader is a zero-argument
callable returning the channel constructor (directly or as an awaitable);
it is invoked the first time a provider of that type is needed, under a
per-type lock, and its result is cached. Failed loads are not cached so a
later call can try again.
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from status_notifier.config.models.providers import BUILTIN_CONFIG_MODELS
from status_notifier.exceptions import ProviderLoadError, ProviderRegistryError
from status_notifier.notifications.base.provider import NotificationProvider
from status_notifier.types.protocols import Channel, ChannelFactory

if TYPE_CHECKING:
    from status_notifier.config.models.base import BaseProviderConfig
    from status_notifier.config.models.providers import ProviderConfig
    from status_notifier.notifications.base.retry import Sleeper

logger = logging.getLogger(__name__)

type ChannelLoader = Callable[[], ChannelFactory | Awaitable[ChannelFactory]]

BUILTIN_ENTRYPOINTS: dict[str, str] = {
    "slack": "status_notifier.plugins.slack.provider:create_provider",
    "email": "status_notifier.plugins.email.provider:create_provider",
    "webhook": "status_notifier.plugins.webhook.provider:create_provider",
    "discord": "status_notifier.plugins.discord.provider:create_provider",
    "pagerduty": "status_notifier.plugins.pagerduty.provider:create_provider",
    "msteams": "status_notifier.plugins.msteams.provider:create_provider",
}


@dataclass(slots=True)
class ProviderRegistryEntry:
    """Registration record for one provider type."""

    provider_type: str
    loader: ChannelLoader
    config_model: type[BaseProviderConfig] | None = None
    constructor: ChannelFactory | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


def _entrypoint_loader(target: str) -> ChannelLoader:
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        msg = f"Entrypoint must look like 'package.module:attribute', got '{target}'"
        raise ProviderRegistryError(msg)

    def load() -> ChannelFactory:
        module = importlib.import_module(module_name)
        return cast(ChannelFactory, getattr(module, attr))

    return load


class ProviderRegistry:
    """Registry for notification provider types."""

    def __init__(self) -> None:
        """Initialize an empty provider registry."""
        self._entries: dict[str, ProviderRegistryEntry] = {}

    def register(
        self,
        provider_type: str,
        loader: ChannelLoader,
        *,
        config_model: type[BaseProviderConfig] | None = None,
    ) -> None:
        """Register a provider type with a deferred loader.

        Args:
            provider_type: Unique type name used in configurations
            loader: Zero-argument callable returning the channel constructor
            config_model: Pydantic model validating configurations of this type

        Raises:
            ProviderRegistryError: If the type is empty or already registered
        """
        if not provider_type:
            msg = "Provider type must be a non-empty string"
            raise ProviderRegistryError(msg)
        if provider_type in self._entries:
            msg = f"Provider type '{provider_type}' is already registered"
            raise ProviderRegistryError(msg)

        self._entries[provider_type] = ProviderRegistryEntry(
            provider_type=provider_type,
            loader=loader,
            config_model=config_model,
        )
        logger.debug("Registered provider type: %s", provider_type)

    def register_constructor(
        self,
        provider_type: str,
        constructor: ChannelFactory,
        *,
        config_model: type[BaseProviderConfig] | None = None,
    ) -> None:
        """Register an already imported channel constructor."""
        self.register(provider_type, lambda: constructor, config_model=config_model)
        self._entries[provider_type].constructor = constructor

    def register_entrypoint(
        self,
        provider_type: str,
        target: str,
        *,
        config_model: type[BaseProviderConfig] | None = None,
    ) -> None:
        """Register a type whose constructor is imported from ``module:attr`` on first use."""
        self.register(provider_type, _entrypoint_loader(target), config_model=config_model)

    def types(self) -> list[str]:
        """List registered provider types in registration order."""
        return list(self._entries)

    def __contains__(self, provider_type: object) -> bool:
        return provider_type in self._entries

    def config_model_for(self, provider_type: str) -> type[BaseProviderConfig] | None:
        """Return the configuration model registered for a type, if any."""
        entry = self._entries.get(provider_type)
        return entry.config_model if entry is not None else None

    def is_loaded(self, provider_type: str) -> bool:
        """Check whether the constructor for a type has been loaded."""
        entry = self._entries.get(provider_type)
        return entry is not None and entry.constructor is not None

    def _entry(self, provider_type: str) -> ProviderRegistryEntry:
        entry = self._entries.get(provider_type)
        if entry is None:
            available = ", ".join(sorted(self._entries)) or "none"
            msg = f"Unknown provider type '{provider_type}'. Available types: [{available}]"
            raise ProviderRegistryError(msg)
        return entry

    async def get_constructor(self, provider_type: str) -> ChannelFactory:
        """Load (once) and return the constructor for a provider type.

        Raises:
            ProviderRegistryError: If the type is not registered
            ProviderLoadError: If the loader fails
        """
        entry = self._entry(provider_type)
        if entry.constructor is not None:
            return entry.constructor

        async with entry.lock:
            if entry.constructor is not None:
                return entry.constructor

            try:
                loaded = entry.loader()
                if inspect.isawaitable(loaded):
                    loaded = await loaded
            except Exception as exc:
                msg = f"Failed to load provider type '{provider_type}': {exc}"
                raise ProviderLoadError(msg, provider_type=provider_type) from exc

            if not callable(loaded):
                msg = f"Loader for provider type '{provider_type}' did not return a callable"
                raise ProviderLoadError(msg, provider_type=provider_type)

            entry.constructor = loaded
            logger.debug("Loaded provider type: %s", provider_type)
            return loaded

    async def create_provider(
        self,
        config: ProviderConfig,
        logger: logging.Logger | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> NotificationProvider:
        """Instantiate the channel for ``config`` and wrap it in the delivery pipeline.

        Args:
            config: Validated provider configuration
            logger: Logger injected into the channel and pipeline
            clock: Monotonic time source for the pipeline
            sleep: Backoff sleep for the pipeline

        Returns:
            Ready-to-use provider

        Raises:
            ProviderRegistryError: If the type is not registered
            ProviderLoadError: If loading or construction fails
        """
        provider_logger = logger or logging.getLogger(f"status_notifier.providers.{config.id}")
        constructor = await self.get_constructor(config.type)

        try:
            built = constructor(config=config, logger=provider_logger)
            channel = await built if inspect.isawaitable(built) else built
        except Exception as exc:
            msg = f"Failed to instantiate provider '{config.id}' of type '{config.type}': {exc}"
            raise ProviderLoadError(
                msg, provider_type=config.type, provider_id=config.id
            ) from exc

        if not isinstance(channel, Channel):
            msg = (
                f"Failed to instantiate provider '{config.id}' of type '{config.type}': "
                "constructor did not return a channel"
            )
            raise ProviderLoadError(msg, provider_type=config.type, provider_id=config.id)

        return NotificationProvider(
            config,
            channel,
            logger=provider_logger,
            clock=clock,
            sleep=sleep,
        )

    @classmethod
    def with_builtins(cls) -> ProviderRegistry:
        """Create a registry with every built-in channel type registered lazily."""
        registry = cls()
        for provider_type, target in BUILTIN_ENTRYPOINTS.items():
            registry.register_entrypoint(
                provider_type,
                target,
                config_model=BUILTIN_CONFIG_MODELS[provider_type],
            )
        return registry


_default_registry: ProviderRegistry | None = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> ProviderRegistry:
    """Return the process-wide registry, creating it with the built-ins on first use."""
    global _default_registry
    with _default_registry_lock:
        if _default_registry is None:
            _default_registry = ProviderRegistry.with_builtins()
        return _default_registry
