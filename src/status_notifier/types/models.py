"""Data models for the status notification pipeline.

This module defines the tagged-union event model, the result/error values
returned by every delivery operation, the notification context handed to
providers, and the per-provider statistics snapshot.

Events are frozen dataclasses. Each variant carries a class-level ``kind``
tag which is the only discriminator; helpers in this module dispatch on the
variant with an exhaustive ``match`` so that adding a variant without
handling it fails loudly.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import ClassVar, Literal, assert_never


def utc_now() -> datetime:
    """Return timezone-aware current datetime."""
    return datetime.now(tz=UTC)


class EventKind(StrEnum):
    """Tag identifying which event variant is present."""

    INCIDENT_OPENED = "incident.opened"
    INCIDENT_CLOSED = "incident.closed"
    INCIDENT_UPDATED = "incident.updated"
    MAINTENANCE_SCHEDULED = "maintenance.scheduled"
    MAINTENANCE_STARTED = "maintenance.started"
    MAINTENANCE_COMPLETED = "maintenance.completed"
    SYSTEM_DOWN = "system.down"
    SYSTEM_DEGRADED = "system.degraded"
    SYSTEM_RECOVERED = "system.recovered"
    SLO_BREACHED = "slo.breached"


class Severity(StrEnum):
    """Ordinal incident severity (critical > major > minor)."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"

    @property
    def rank(self) -> int:
        """Numeric rank used for minimum-severity comparisons."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.CRITICAL: 3,
    Severity.MAJOR: 2,
    Severity.MINOR: 1,
}

type SystemType = Literal["system", "process"]
type SloMetric = Literal["uptime", "response_time"]


# Incident events


@dataclass(slots=True, frozen=True)
class IncidentOpened:
    """A new incident was opened."""

    kind: ClassVar[EventKind] = EventKind.INCIDENT_OPENED

    incident_id: int
    title: str
    severity: Severity
    affected_entities: tuple[str, ...]
    url: str
    body: str = ""
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(slots=True, frozen=True)
class IncidentClosed:
    """An incident was resolved."""

    kind: ClassVar[EventKind] = EventKind.INCIDENT_CLOSED

    incident_id: int
    title: str
    duration_ms: int
    affected_entities: tuple[str, ...]
    url: str
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(slots=True, frozen=True)
class IncidentChanges:
    """What changed in an incident update."""

    severity_from: Severity | None = None
    severity_to: Severity | None = None
    entities_added: tuple[str, ...] = ()
    entities_removed: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class IncidentUpdated:
    """An open incident changed severity or scope."""

    kind: ClassVar[EventKind] = EventKind.INCIDENT_UPDATED

    incident_id: int
    title: str
    severity: Severity
    affected_entities: tuple[str, ...]
    url: str
    changes: IncidentChanges = field(default_factory=IncidentChanges)
    timestamp: datetime = field(default_factory=utc_now)


# Maintenance events


@dataclass(slots=True, frozen=True)
class MaintenanceScheduled:
    """A maintenance window was scheduled."""

    kind: ClassVar[EventKind] = EventKind.MAINTENANCE_SCHEDULED

    maintenance_id: int
    title: str
    start: datetime
    end: datetime
    affected_entities: tuple[str, ...]
    url: str
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(slots=True, frozen=True)
class MaintenanceStarted:
    """A maintenance window began."""

    kind: ClassVar[EventKind] = EventKind.MAINTENANCE_STARTED

    maintenance_id: int
    title: str
    end: datetime
    affected_entities: tuple[str, ...]
    url: str
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(slots=True, frozen=True)
class MaintenanceCompleted:
    """A maintenance window finished."""

    kind: ClassVar[EventKind] = EventKind.MAINTENANCE_COMPLETED

    maintenance_id: int
    title: str
    duration_ms: int
    affected_entities: tuple[str, ...]
    url: str
    timestamp: datetime = field(default_factory=utc_now)


# System events


@dataclass(slots=True, frozen=True)
class SystemDown:
    """A monitored system stopped responding."""

    kind: ClassVar[EventKind] = EventKind.SYSTEM_DOWN

    name: str
    system_type: SystemType
    last_check: datetime
    response_time_ms: float | None = None
    status_code: int | None = None
    error: str | None = None
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(slots=True, frozen=True)
class SystemDegraded:
    """A monitored system responds but outside its normal envelope."""

    kind: ClassVar[EventKind] = EventKind.SYSTEM_DEGRADED

    name: str
    system_type: SystemType
    last_check: datetime
    reason: str
    response_time_ms: float | None = None
    status_code: int | None = None
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(slots=True, frozen=True)
class SystemRecovered:
    """A previously down or degraded system is healthy again."""

    kind: ClassVar[EventKind] = EventKind.SYSTEM_RECOVERED

    name: str
    system_type: SystemType
    downtime_ms: int
    last_check: datetime
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(slots=True, frozen=True)
class SloBreached:
    """A service-level objective was missed over its period."""

    kind: ClassVar[EventKind] = EventKind.SLO_BREACHED

    entity: str
    metric: SloMetric
    target: float
    actual: float
    period: str
    timestamp: datetime = field(default_factory=utc_now)


type NotificationEvent = (
    IncidentOpened
    | IncidentClosed
    | IncidentUpdated
    | MaintenanceScheduled
    | MaintenanceStarted
    | MaintenanceCompleted
    | SystemDown
    | SystemDegraded
    | SystemRecovered
    | SloBreached
)


def affected_entities(event: NotificationEvent) -> tuple[str, ...]:
    """Return the entity names an event is about.

    Args:
        event: Any notification event

    Returns:
        Entity names used for entity filtering
    """
    match event:
        case IncidentOpened() | IncidentClosed() | IncidentUpdated():
            return event.affected_entities
        case MaintenanceScheduled() | MaintenanceStarted() | MaintenanceCompleted():
            return event.affected_entities
        case SystemDown() | SystemDegraded() | SystemRecovered():
            return (event.name,)
        case SloBreached():
            return (event.entity,)
        case _:
            assert_never(event)


def event_severity(event: NotificationEvent) -> Severity | None:
    """Return the severity carried by an event, if any.

    Only opened and updated incidents carry a severity; every other event
    passes minimum-severity filtering unconditionally.
    """
    match event:
        case IncidentOpened() | IncidentUpdated():
            return event.severity
        case (
            IncidentClosed()
            | MaintenanceScheduled()
            | MaintenanceStarted()
            | MaintenanceCompleted()
            | SystemDown()
            | SystemDegraded()
            | SystemRecovered()
            | SloBreached()
        ):
            return None
        case _:
            assert_never(event)


def _jsonable(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): _jsonable(val) for key, val in value.items()}  # pyright: ignore[reportUnknownVariableType]
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]  # pyright: ignore[reportUnknownVariableType]
    return value


def event_to_dict(event: NotificationEvent) -> dict[str, object]:
    """Convert an event into a JSON-ready mapping including its kind."""
    payload: dict[str, object] = {"kind": str(event.kind)}
    for key, value in asdict(event).items():
        payload[key] = _jsonable(value)
    return payload


# Results and errors


class ErrorCode(StrEnum):
    """Well-known error codes produced by the pipeline and built-in channels."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CHANNEL_ERROR = "CHANNEL_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SEND_ERROR = "SEND_ERROR"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"


@dataclass(slots=True, frozen=True)
class NotificationError:
    """Structured error information carried by a failed result."""

    code: str
    message: str
    provider_id: str
    retryable: bool
    timestamp: datetime = field(default_factory=utc_now)
    cause: object | None = None

    def __str__(self) -> str:
        """String representation of the error."""
        return f"[{self.code}] {self.provider_id}: {self.message}"


@dataclass(frozen=True)
class NotificationSuccess[T]:
    """Successful outcome, optionally carrying data.

    ``skipped`` marks the neutral outcome of a provider declining an event
    because of its filters.
    """

    success: ClassVar[Literal[True]] = True

    data: T
    skipped: bool = False


@dataclass(slots=True, frozen=True)
class NotificationFailure:
    """Failed outcome carrying a structured error."""

    success: ClassVar[Literal[False]] = False

    error: NotificationError


type NotificationResult[T] = NotificationSuccess[T] | NotificationFailure


def success[T](data: T) -> NotificationSuccess[T]:
    """Create a successful result."""
    return NotificationSuccess(data=data)


def skipped() -> NotificationSuccess[None]:
    """Create the neutral result of a filtered-out event."""
    return NotificationSuccess(data=None, skipped=True)


def failure(
    code: str,
    message: str,
    provider_id: str,
    *,
    retryable: bool = False,
    cause: object | None = None,
) -> NotificationFailure:
    """Create a failed result.

    Args:
        code: Error code, usually an ``ErrorCode`` member
        message: Human-readable description
        provider_id: Identifier of the provider the error belongs to
        retryable: Whether the pipeline may retry the operation
        cause: Original exception or payload, if any

    Returns:
        Failed result wrapping a ``NotificationError``
    """
    return NotificationFailure(
        error=NotificationError(
            code=str(code),
            message=message,
            provider_id=provider_id,
            retryable=retryable,
            cause=cause,
        )
    )


# Context


@dataclass(slots=True)
class ContextDefaults:
    """Shared notification metadata without an event.

    Used both for service-wide defaults and for per-call overrides.
    """

    status_page_url: str | None = None
    organization_name: str | None = None
    environment: str | None = None
    metadata: dict[str, object] = field(default_factory=dict)

    def merge(self, other: ContextDefaults | None) -> ContextDefaults:
        """Return a copy where set fields of ``other`` win.

        Metadata maps are merged key by key.
        """
        if other is None:
            return replace(self, metadata=dict(self.metadata))
        return ContextDefaults(
            status_page_url=other.status_page_url or self.status_page_url,
            organization_name=other.organization_name or self.organization_name,
            environment=other.environment or self.environment,
            metadata={**self.metadata, **other.metadata},
        )


@dataclass(slots=True, frozen=True)
class NotificationContext:
    """Event plus shared metadata passed to every provider."""

    event: NotificationEvent
    status_page_url: str | None = None
    organization_name: str | None = None
    environment: str | None = None
    metadata: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        event: NotificationEvent,
        defaults: ContextDefaults | None = None,
        overrides: ContextDefaults | None = None,
    ) -> NotificationContext:
        """Merge defaults and per-call overrides around an event."""
        merged = (defaults or ContextDefaults()).merge(overrides)
        return cls(
            event=event,
            status_page_url=merged.status_page_url,
            organization_name=merged.organization_name,
            environment=merged.environment,
            metadata=merged.metadata,
        )


# Statistics


@dataclass(slots=True)
class NotificationStats:
    """Delivery statistics for one provider instance."""

    provider_id: str
    provider_type: str
    total_attempts: int = 0
    success_count: int = 0
    failure_count: int = 0
    last_success: datetime | None = None
    last_failure: datetime | None = None
    average_latency_ms: float | None = None
    rate_limit_hits: int = 0

    def record(self, succeeded: bool, latency_ms: float) -> None:
        """Fold one terminal delivery outcome into the counters."""
        self.total_attempts += 1
        if succeeded:
            self.success_count += 1
            self.last_success = utc_now()
        else:
            self.failure_count += 1
            self.last_failure = utc_now()

        previous = self.average_latency_ms if self.average_latency_ms is not None else latency_ms
        self.average_latency_ms = previous + (latency_ms - previous) / self.total_attempts

    def snapshot(self) -> NotificationStats:
        """Return an independent copy safe to hand to callers."""
        return replace(self)


@dataclass(slots=True)
class EventDispatch:
    """Per-event entry of a batch result."""

    event: NotificationEvent
    provider_results: dict[str, NotificationResult[object]]


@dataclass(slots=True)
class BatchNotificationResult:
    """Aggregated outcome of ``notify_batch``."""

    total_events: int
    successful_events: int
    failed_events: int
    results: list[EventDispatch] = field(default_factory=list)


@dataclass(slots=True)
class Response:
    """HTTP response.

    Represents an HTTP response with status code, body, and headers.
    """

    status: int
    body: Mapping[str, object] | str
    headers: Mapping[str, str]
