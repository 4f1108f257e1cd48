"""Channel-neutral text formatting of notification events."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, assert_never

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
)

type Tone = Literal["critical", "major", "minor", "maintenance", "recovered", "info"]

TONE_HEX: dict[Tone, str] = {
    "critical": "#D13438",
    "major": "#FF8C00",
    "minor": "#FFB900",
    "maintenance": "#0078D4",
    "recovered": "#107C10",
    "info": "#605E5C",
}

TONE_EMOJI: dict[Tone, str] = {
    "critical": ":red_circle:",
    "major": ":large_orange_circle:",
    "minor": ":large_yellow_circle:",
    "maintenance": ":wrench:",
    "recovered": ":white_check_mark:",
    "info": ":information_source:",
}


def format_duration(ms: int) -> str:
    """Render a millisecond duration as its two most significant units.

    Example:
        >>> format_duration(3_900_000)
        '1h 5m'
    """
    seconds = max(ms, 0) // 1000
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def format_time(value: datetime) -> str:
    """Render a timestamp in UTC ISO-like form."""
    return value.strftime("%Y-%m-%d %H:%M %Z").strip()


def event_tone(event: NotificationEvent) -> Tone:
    """Classify an event into the color/emoji family used by chat channels."""
    match event:
        case IncidentOpened() | IncidentUpdated():
            return event.severity.value
        case IncidentClosed() | SystemRecovered():
            return "recovered"
        case MaintenanceScheduled() | MaintenanceStarted() | MaintenanceCompleted():
            return "maintenance"
        case SystemDown():
            return "critical"
        case SystemDegraded() | SloBreached():
            return "major"
        case _:
            assert_never(event)


def event_title(event: NotificationEvent) -> str:
    """One-line headline for an event."""
    match event:
        case IncidentOpened():
            return f"[{event.severity.upper()}] Incident: {event.title}"
        case IncidentClosed():
            return f"Incident Resolved: {event.title}"
        case IncidentUpdated():
            return f"Incident Updated: {event.title}"
        case MaintenanceScheduled():
            return f"Scheduled Maintenance: {event.title}"
        case MaintenanceStarted():
            return f"Maintenance Started: {event.title}"
        case MaintenanceCompleted():
            return f"Maintenance Completed: {event.title}"
        case SystemDown():
            return f"System Down: {event.name} ({event.system_type})"
        case SystemDegraded():
            return f"System Degraded: {event.name} ({event.system_type})"
        case SystemRecovered():
            return f"System Recovered: {event.name}"
        case SloBreached():
            return f"SLO Breached: {event.entity}"
        case _:
            assert_never(event)


def event_details(event: NotificationEvent) -> list[tuple[str, str]]:
    """Label/value pairs describing an event, in display order."""
    match event:
        case IncidentOpened():
            return [
                ("Severity", event.severity.value),
                ("Affected", ", ".join(event.affected_entities) or "-"),
            ]
        case IncidentClosed():
            return [
                ("Duration", format_duration(event.duration_ms)),
                ("Affected", ", ".join(event.affected_entities) or "-"),
            ]
        case IncidentUpdated():
            details = [
                ("Severity", event.severity.value),
                ("Affected", ", ".join(event.affected_entities) or "-"),
            ]
            changes = event.changes
            if changes.severity_from is not None and changes.severity_to is not None:
                details.append(
                    ("Severity change", f"{changes.severity_from} -> {changes.severity_to}")
                )
            if changes.entities_added:
                details.append(("Added", ", ".join(changes.entities_added)))
            if changes.entities_removed:
                details.append(("Removed", ", ".join(changes.entities_removed)))
            return details
        case MaintenanceScheduled():
            return [
                ("Start", format_time(event.start)),
                ("End", format_time(event.end)),
                ("Affected", ", ".join(event.affected_entities) or "-"),
            ]
        case MaintenanceStarted():
            return [
                ("Expected end", format_time(event.end)),
                ("Affected", ", ".join(event.affected_entities) or "-"),
            ]
        case MaintenanceCompleted():
            return [("Duration", format_duration(event.duration_ms))]
        case SystemDown():
            details = [("Error", event.error or "No response")]
            if event.status_code is not None:
                details.append(("Status code", str(event.status_code)))
            return details
        case SystemDegraded():
            details = [("Reason", event.reason)]
            if event.response_time_ms is not None:
                details.append(("Response time", f"{event.response_time_ms:.0f}ms"))
            return details
        case SystemRecovered():
            return [("Downtime", format_duration(event.downtime_ms))]
        case SloBreached():
            unit = "%" if event.metric == "uptime" else "ms"
            return [
                ("Metric", event.metric),
                ("Target", f"{event.target:g}{unit}"),
                ("Actual", f"{event.actual:g}{unit}"),
                ("Period", event.period),
            ]
        case _:
            assert_never(event)


def event_url(event: NotificationEvent) -> str | None:
    """Link to the incident or maintenance page, when the event has one."""
    match event:
        case IncidentOpened() | IncidentClosed() | IncidentUpdated():
            return event.url
        case MaintenanceScheduled() | MaintenanceStarted() | MaintenanceCompleted():
            return event.url
        case SystemDown() | SystemDegraded() | SystemRecovered() | SloBreached():
            return None
        case _:
            assert_never(event)


def format_message(context: NotificationContext) -> str:
    """Plain-text rendering used by text channels and as a fallback."""
    event = context.event
    lines = [event_title(event)]
    lines.extend(f"{label}: {value}" for label, value in event_details(event))
    url = event_url(event) or context.status_page_url
    if url:
        lines.append(url)
    return "\n".join(lines)


def footer(context: NotificationContext) -> str | None:
    """Organization and environment line, if any is configured."""
    parts = [part for part in (context.organization_name, context.environment) if part]
    return " | ".join(parts) if parts else None


def mention_severity(event: NotificationEvent) -> Severity | None:
    """Severity deciding which mention list applies (opened incidents only)."""
    if isinstance(event, IncidentOpened) and event.severity in (Severity.CRITICAL, Severity.MAJOR):
        return event.severity
    return None
