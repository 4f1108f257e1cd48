"""Event filtering applied before a provider is invoked."""

from __future__ import annotations

from typing import TYPE_CHECKING

from status_notifier.types.models import NotificationEvent, affected_entities, event_severity

if TYPE_CHECKING:
    from status_notifier.config.models.base import BaseProviderConfig


def filter_reason(config: BaseProviderConfig, event: NotificationEvent) -> str | None:
    """Explain why ``config`` declines ``event``.

    The ``enabled`` flag is not considered here; the provider tracks its own
    runtime enablement.

    Args:
        config: Provider configuration holding the filters
        event: Event about to be dispatched

    Returns:
        ``None`` when the event passes every filter, otherwise a short reason
    """
    if config.event_filter and event.kind not in config.event_filter:
        return f"event kind {event.kind} not in event_filter"

    if config.entity_filter:
        wanted = set(config.entity_filter)
        if wanted.isdisjoint(affected_entities(event)):
            return "no affected entity matches entity_filter"

    severity = event_severity(event)
    if severity is not None and severity.rank < config.min_severity.rank:
        return f"severity {severity} below min_severity {config.min_severity}"

    return None


def accepts(config: BaseProviderConfig, event: NotificationEvent) -> bool:
    """Return True if ``config`` is enabled and its filters accept ``event``."""
    return config.enabled and filter_reason(config, event) is None
