"""PagerDuty Events API v2 channel.

Incidents, outages and SLO breaches trigger alerts; closing an incident or
recovering a system resolves the alert opened for it, matched through a
deduplication key derived from the event.
"""

from __future__ import annotations

import logging
from typing import Literal, assert_never, override

from status_notifier.config.models.providers import PagerDutyProviderConfig
from status_notifier.plugins.delivery import WebhookChannel
from status_notifier.plugins.formatting import event_details, event_title, event_url
from status_notifier.types.models import (
    IncidentClosed,
    IncidentOpened,
    IncidentUpdated,
    MaintenanceCompleted,
    MaintenanceScheduled,
    MaintenanceStarted,
    NotificationContext,
    NotificationEvent,
    Severity,
    SloBreached,
    SystemDegraded,
    SystemDown,
    SystemRecovered,
    affected_entities,
)
from status_notifier.types.protocols import HTTPClient

__all__ = ["PagerDutyChannel", "create_provider", "dedup_key"]

type EventAction = Literal["trigger", "resolve"]


def dedup_key(event: NotificationEvent) -> str:
    """Key tying trigger and resolve events for the same subject together."""
    match event:
        case IncidentOpened() | IncidentClosed() | IncidentUpdated():
            return f"incident-{event.incident_id}"
        case MaintenanceScheduled() | MaintenanceStarted() | MaintenanceCompleted():
            return f"maintenance-{event.maintenance_id}"
        case SystemDown() | SystemDegraded() | SystemRecovered():
            return f"system-{event.name}"
        case SloBreached():
            return f"slo-{event.entity}-{event.metric}"
        case _:
            assert_never(event)


def event_action(event: NotificationEvent) -> EventAction:
    """Whether the event opens or resolves an alert."""
    match event:
        case IncidentClosed() | SystemRecovered() | MaintenanceCompleted():
            return "resolve"
        case (
            IncidentOpened()
            | IncidentUpdated()
            | MaintenanceScheduled()
            | MaintenanceStarted()
            | SystemDown()
            | SystemDegraded()
            | SloBreached()
        ):
            return "trigger"
        case _:
            assert_never(event)


class PagerDutyChannel(WebhookChannel[PagerDutyProviderConfig]):
    """Channel sending alert events to the PagerDuty Events API.

    ``api_key`` is accepted in configuration but only the routing (or
    integration) key is needed for event ingestion.
    """

    @override
    def target_url(self) -> str:
        return self.config.events_url

    def _severity(self, event: NotificationEvent) -> str:
        mapping = self.config.severity
        match event:
            case IncidentOpened() | IncidentUpdated():
                return {
                    Severity.CRITICAL: mapping.critical,
                    Severity.MAJOR: mapping.major,
                    Severity.MINOR: mapping.minor,
                }[event.severity]
            case SystemDown():
                return mapping.critical
            case SystemDegraded() | SloBreached():
                return mapping.major
            case _:
                return "info"

    @override
    def build_payload(self, context: NotificationContext) -> dict[str, object]:
        event = context.event
        action = event_action(event)
        payload: dict[str, object] = {
            "routing_key": self.config.routing_key or self.config.integration_key,
            "event_action": action,
            "dedup_key": dedup_key(event),
        }
        if action == "resolve":
            return payload

        payload["payload"] = {
            "summary": event_title(event)[:1024],
            "source": context.organization_name or "status-notifier",
            "severity": self._severity(event),
            "timestamp": event.timestamp.isoformat(),
            "component": ", ".join(affected_entities(event)) or None,
            "group": context.environment,
            "class": str(event.kind),
            "custom_details": {label: value for label, value in event_details(event)},
        }
        url = event_url(event) or context.status_page_url
        if url:
            payload["links"] = [{"href": url, "text": "Status page"}]
        return payload


def create_provider(
    *,
    config: PagerDutyProviderConfig,
    logger: logging.Logger,
    http_client: HTTPClient | None = None,
) -> PagerDutyChannel:
    """Factory function for creating PagerDutyChannel instances."""
    if not isinstance(config, PagerDutyProviderConfig):  # pyright: ignore[reportUnnecessaryIsInstance]
        msg = f"Expected PagerDutyProviderConfig, got {type(config).__name__}"
        raise TypeError(msg)
    return PagerDutyChannel(config, logger=logger, http_client=http_client)
