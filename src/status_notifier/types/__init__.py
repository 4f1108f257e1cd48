"""Shared data models and protocols."""

from status_notifier.types.models import (
    BatchNotificationResult,
    ContextDefaults,
    ErrorCode,
    EventDispatch,
    EventKind,
    IncidentChanges,
    IncidentClosed,
    IncidentOpened,
    IncidentUpdated,
    MaintenanceCompleted,
    MaintenanceScheduled,
    MaintenanceStarted,
    NotificationContext,
    NotificationError,
    NotificationEvent,
    NotificationFailure,
    NotificationResult,
    NotificationStats,
    NotificationSuccess,
    Severity,
    SloBreached,
    SystemDegraded,
    SystemDown,
    SystemRecovered,
    affected_entities,
    event_severity,
    event_to_dict,
    failure,
    skipped,
    success,
)

__all__ = [
    "BatchNotificationResult",
    "ContextDefaults",
    "ErrorCode",
    "EventDispatch",
    "EventKind",
    "IncidentChanges",
    "IncidentClosed",
    "IncidentOpened",
    "IncidentUpdated",
    "MaintenanceCompleted",
    "MaintenanceScheduled",
    "MaintenanceStarted",
    "NotificationContext",
    "NotificationError",
    "NotificationEvent",
    "NotificationFailure",
    "NotificationResult",
    "NotificationStats",
    "NotificationSuccess",
    "Severity",
    "SloBreached",
    "SystemDegraded",
    "SystemDown",
    "SystemRecovered",
    "affected_entities",
    "event_severity",
    "event_to_dict",
    "failure",
    "skipped",
    "success",
]
