"""Notification service fanning events out to configured providers.

The service owns one ``NotificationProvider`` per configured id. Providers
are loaded through a ``ProviderRegistry`` either up front (eager) or on the
first event that reaches them (lazy). Each ``notify`` call dispatches to the
selected providers in chunks of at most ``max_concurrency``; a chunk is
awaited completely before the next one starts.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Self

from status_notifier.config.models.service import NotificationServiceConfig
from status_notifier.config.validator import ConfigValidator
from status_notifier.exceptions import (
    DuplicateProviderError,
    NotificationServiceError,
    ProviderRegistryError,
)
from status_notifier.notifications.base.filters import filter_reason
from status_notifier.notifications.registry import ProviderRegistry, get_default_registry
from status_notifier.types.models import (
    BatchNotificationResult,
    ContextDefaults,
    ErrorCode,
    EventDispatch,
    NotificationContext,
    NotificationError,
    NotificationEvent,
    NotificationFailure,
    NotificationResult,
    NotificationStats,
    failure,
)
from status_notifier.utils.logging import correlation_scope, provider_logger
from status_notifier.utils.sanitization import sanitize_exception

if TYPE_CHECKING:
    from status_notifier.config.models.providers import ProviderConfig
    from status_notifier.notifications.base.provider import NotificationProvider
    from status_notifier.notifications.base.retry import Sleeper

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _ProviderSlot:
    """Service-side state for one configured provider."""

    config: ProviderConfig
    enabled: bool
    provider: NotificationProvider | None = None
    load_error: NotificationError | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


class NotificationService:
    """Dispatch events to every interested provider.

    Args:
        providers: Validated provider configurations
        settings: Loading strategy, concurrency and default context
        registry: Registry used to build providers (process default if omitted)
        clock: Monotonic time source handed to every provider pipeline
        sleep: Backoff sleep handed to every provider pipeline
    """

    def __init__(
        self,
        providers: Sequence[ProviderConfig],
        settings: NotificationServiceConfig | None = None,
        *,
        registry: ProviderRegistry | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._configs: list[ProviderConfig] = list(providers)
        self._settings: NotificationServiceConfig = settings or NotificationServiceConfig()
        self._registry: ProviderRegistry = registry or get_default_registry()
        self._clock: Callable[[], float] = clock
        self._sleep: Sleeper = sleep
        self._default_context: ContextDefaults = self._settings.default_context.to_defaults()
        self._slots: dict[str, _ProviderSlot] = {}
        self._initialized: bool = False
        self._init_lock: asyncio.Lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.shutdown()

    @property
    def is_initialized(self) -> bool:
        """Whether ``initialize()`` has completed."""
        return self._initialized

    @property
    def settings(self) -> NotificationServiceConfig:
        """Service settings."""
        return self._settings

    async def initialize(self) -> None:
        """Register every configured provider.

        Calling this more than once has no further effect. With the eager
        loading strategy every enabled provider is loaded concurrently.

        Raises:
            DuplicateProviderError: If two configurations share an id; nothing
                is registered or loaded in that case
        """
        async with self._init_lock:
            if self._initialized:
                return

            counts = Counter(config.id for config in self._configs)
            duplicates = sorted(provider_id for provider_id, n in counts.items() if n > 1)
            if duplicates:
                raise DuplicateProviderError(duplicates)

            self._slots = {
                config.id: _ProviderSlot(
                    config=config.model_copy(deep=True),
                    enabled=config.enabled,
                )
                for config in self._configs
            }
            self._initialized = True
            logger.info(
                "Notification service initialized with %d provider(s) (strategy=%s)",
                len(self._slots),
                self._settings.loading_strategy,
            )

            if self._settings.loading_strategy == "eager":
                _ = await asyncio.gather(
                    *(self._load(slot) for slot in self._slots.values() if slot.enabled)
                )

    def _require_initialized(self) -> None:
        if not self._initialized:
            msg = "NotificationService is not initialized; call initialize() first"
            raise NotificationServiceError(msg)

    def _unavailable(self, slot: _ProviderSlot, message: str, cause: object) -> NotificationError:
        error = failure(
            ErrorCode.PROVIDER_UNAVAILABLE,
            message,
            slot.config.id,
            retryable=False,
            cause=cause,
        ).error
        slot.load_error = error
        logger.error("Provider %s unavailable: %s", slot.config.id, message)
        return error

    async def _load(self, slot: _ProviderSlot) -> NotificationProvider | NotificationFailure:
        if slot.provider is not None:
            return slot.provider
        if slot.load_error is not None:
            return NotificationFailure(error=slot.load_error)

        async with slot.lock:
            if slot.provider is not None:
                return slot.provider
            if slot.load_error is not None:
                return NotificationFailure(error=slot.load_error)

            config = slot.config
            try:
                provider = await self._registry.create_provider(
                    config,
                    provider_logger(config.id),
                    clock=self._clock,
                    sleep=self._sleep,
                )
            except ProviderRegistryError as exc:
                return NotificationFailure(
                    error=self._unavailable(slot, sanitize_exception(exc), exc)
                )

            validation = await provider.validate()
            if isinstance(validation, NotificationFailure):
                await provider.aclose()
                message = f"Configuration rejected: {validation.error.message}"
                return NotificationFailure(
                    error=self._unavailable(slot, message, validation.error)
                )

            if slot.enabled:
                provider.enable()
            else:
                provider.disable()
            slot.provider = provider
            logger.debug("Loaded provider %s (type=%s)", config.id, config.type)
            return provider

    async def _send_one(
        self, provider: NotificationProvider, context: NotificationContext
    ) -> NotificationResult[object]:
        try:
            return await provider.send(context)
        except Exception as exc:
            logger.error(
                "Provider %s raised while sending: %s", provider.id, sanitize_exception(exc)
            )
            return failure(
                ErrorCode.SEND_ERROR,
                sanitize_exception(exc),
                provider.id,
                retryable=False,
                cause=exc,
            )

    def _select(self, event: NotificationEvent) -> list[_ProviderSlot]:
        return [
            slot
            for slot in self._slots.values()
            if slot.enabled and filter_reason(slot.config, event) is None
        ]

    async def notify(
        self,
        event: NotificationEvent,
        overrides: ContextDefaults | None = None,
    ) -> dict[str, NotificationResult[object]]:
        """Deliver one event to every enabled provider whose filters accept it.

        Args:
            event: Event to deliver
            overrides: Per-call context values merged over the defaults

        Returns:
            Result per provider id. Filtered-out and disabled providers are
            absent; providers that could not be loaded carry a
            ``PROVIDER_UNAVAILABLE`` failure.

        Raises:
            NotificationServiceError: If the service is not initialized
        """
        self._require_initialized()
        context = NotificationContext.build(event, self._default_context, overrides)

        with correlation_scope() as correlation_id:
            selected = self._select(event)
            logger.debug(
                "Dispatching %s to %d provider(s) (correlation_id=%s)",
                event.kind,
                len(selected),
                correlation_id,
            )

            results: dict[str, NotificationResult[object]] = {}
            loaded = await asyncio.gather(*(self._load(slot) for slot in selected))

            dispatchable: list[NotificationProvider] = []
            for slot, outcome in zip(selected, loaded, strict=True):
                if isinstance(outcome, NotificationFailure):
                    results[slot.config.id] = outcome
                else:
                    dispatchable.append(outcome)

            for chunk in itertools.batched(dispatchable, self._settings.max_concurrency):
                outcomes = await asyncio.gather(
                    *(self._send_one(provider, context) for provider in chunk)
                )
                for provider, result in zip(chunk, outcomes, strict=True):
                    results[provider.id] = result

                if not self._settings.continue_on_error and not all(
                    result.success for result in outcomes
                ):
                    logger.warning(
                        "Stopping dispatch of %s after a failed chunk (continue_on_error=False)",
                        event.kind,
                    )
                    break

            failed = sum(1 for result in results.values() if not result.success)
            logger.info(
                "Dispatched %s: %d result(s), %d failure(s)",
                event.kind,
                len(results),
                failed,
            )
            return results

    async def notify_batch(
        self,
        events: Iterable[NotificationEvent],
        context: ContextDefaults | None = None,
    ) -> BatchNotificationResult:
        """Deliver several events one after another.

        An event counts as successful when at least one provider succeeded.
        """
        self._require_initialized()
        dispatches: list[EventDispatch] = []
        successful = 0
        for event in events:
            provider_results = await self.notify(event, context)
            if any(result.success for result in provider_results.values()):
                successful += 1
            dispatches.append(EventDispatch(event=event, provider_results=provider_results))

        return BatchNotificationResult(
            total_events=len(dispatches),
            successful_events=successful,
            failed_events=len(dispatches) - successful,
            results=dispatches,
        )

    def get_stats(self) -> dict[str, NotificationStats]:
        """Statistics snapshots for every loaded provider."""
        return {
            provider_id: slot.provider.get_stats()
            for provider_id, slot in self._slots.items()
            if slot.provider is not None
        }

    def get_provider_stats(self, provider_id: str) -> NotificationStats | None:
        """Statistics snapshot for one provider, if it is loaded."""
        slot = self._slots.get(provider_id)
        if slot is None or slot.provider is None:
            return None
        return slot.provider.get_stats()

    def reset_stats(self, provider_id: str | None = None) -> None:
        """Reset statistics for one provider or, without an id, for all."""
        if provider_id is not None:
            slot = self._slots.get(provider_id)
            if slot is not None and slot.provider is not None:
                slot.provider.reset_stats()
            return
        for slot in self._slots.values():
            if slot.provider is not None:
                slot.provider.reset_stats()

    async def enable_provider(self, provider_id: str) -> bool:
        """Enable a provider and clear any previous load failure.

        Returns:
            False if no provider with this id is registered
        """
        slot = self._slots.get(provider_id)
        if slot is None:
            return False

        slot.enabled = True
        slot.load_error = None
        if slot.provider is not None:
            slot.provider.enable()
        elif self._settings.loading_strategy == "eager":
            _ = await self._load(slot)
        logger.info("Provider %s enabled", provider_id)
        return True

    async def disable_provider(self, provider_id: str) -> bool:
        """Disable a provider; it is skipped by later ``notify`` calls.

        Returns:
            False if no provider with this id is registered
        """
        slot = self._slots.get(provider_id)
        if slot is None:
            return False

        slot.enabled = False
        if slot.provider is not None:
            slot.provider.disable()
        logger.info("Provider %s disabled", provider_id)
        return True

    def provider_ids(self) -> list[str]:
        """Ids of every registered provider, in configuration order."""
        return list(self._slots)

    def has_provider(self, provider_id: str) -> bool:
        """Check whether a provider id is registered."""
        return provider_id in self._slots

    def get_provider_config(self, provider_id: str) -> ProviderConfig | None:
        """Return a copy of a provider's configuration."""
        slot = self._slots.get(provider_id)
        return slot.config.model_copy(deep=True) if slot is not None else None

    def is_loaded(self, provider_id: str) -> bool:
        """Check whether a provider instance has been created."""
        slot = self._slots.get(provider_id)
        return slot is not None and slot.provider is not None

    async def shutdown(self) -> None:
        """Close every loaded channel and return to the uninitialized state."""
        async with self._init_lock:
            providers = [
                slot.provider for slot in self._slots.values() if slot.provider is not None
            ]
            outcomes = await asyncio.gather(
                *(provider.aclose() for provider in providers),
                return_exceptions=True,
            )
            for provider, outcome in zip(providers, outcomes, strict=True):
                if isinstance(outcome, Exception):
                    logger.warning(
                        "Error while closing provider %s: %s",
                        provider.id,
                        sanitize_exception(outcome),
                    )

            self._slots = {}
            self._initialized = False
            logger.info("Notification service shut down (%d provider(s) closed)", len(providers))


async def create_notification_service(
    settings: NotificationServiceConfig | Mapping[str, object],
    *,
    registry: ProviderRegistry | None = None,
    environ: Mapping[str, str] | None = None,
) -> NotificationService:
    """Validate provider entries and return an initialized service.

    Args:
        settings: Service settings including raw ``providers`` entries
        registry: Registry to build providers from (process default if omitted)
        environ: Environment used to resolve ``env:NAME`` references

    Returns:
        Initialized notification service

    Raises:
        ConfigValidationError: If any provider entry is invalid
    """
    resolved_settings = (
        settings
        if isinstance(settings, NotificationServiceConfig)
        else NotificationServiceConfig.model_validate(settings)
    )
    resolved_registry = registry or get_default_registry()
    configs = ConfigValidator(resolved_registry, environ).ensure_valid(resolved_settings.providers)

    service = NotificationService(configs, resolved_settings, registry=resolved_registry)
    await service.initialize()
    return service
