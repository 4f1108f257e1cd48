"""Tests for channel-neutral event formatting."""

from __future__ import annotations

import pytest

from status_notifier.plugins.formatting import (
    event_details,
    event_title,
    event_tone,
    footer,
    format_duration,
    format_message,
    mention_severity,
)
from status_notifier.types.models import (
    IncidentChanges,
    IncidentUpdated,
    NotificationContext,
    Severity,
    SloBreached,
    SystemRecovered,
)
from tests.fixtures.notification_mocks import (
    FIXED_TIME,
    make_incident_closed,
    make_incident_opened,
    make_maintenance_scheduled,
    make_system_down,
)


@pytest.mark.parametrize(
    ("ms", "expected"),
    [
        (0, "0s"),
        (59_999, "59s"),
        (61_000, "1m 1s"),
        (3_900_000, "1h 5m"),
        (90_000_000, "1d 1h"),
        (-5, "0s"),
    ],
)
def test_format_duration(ms: int, expected: str) -> None:
    """Durations show their two most significant units."""
    assert format_duration(ms) == expected


class TestEventText:
    """Titles, details and tones."""

    def test_incident_opened_title_has_severity(self) -> None:
        """Severity is shown in upper case."""
        event = make_incident_opened(severity=Severity.CRITICAL, title="DB down")

        assert event_title(event) == "[CRITICAL] Incident: DB down"
        assert event_tone(event) == "critical"

    def test_incident_closed_shows_duration(self) -> None:
        """Resolved incidents report how long they lasted."""
        event = make_incident_closed(duration_ms=3_900_000)

        assert event_title(event) == "Incident Resolved: API latency"
        assert ("Duration", "1h 5m") in event_details(event)
        assert event_tone(event) == "recovered"

    def test_incident_updated_lists_changes(self) -> None:
        """Severity and scope changes are spelled out."""
        event = IncidentUpdated(
            incident_id=42,
            title="API latency",
            severity=Severity.CRITICAL,
            affected_entities=("api", "web"),
            url="https://status.example.com/incidents/42",
            changes=IncidentChanges(
                severity_from=Severity.MINOR,
                severity_to=Severity.CRITICAL,
                entities_added=("web",),
            ),
            timestamp=FIXED_TIME,
        )

        assert event_title(event) == "Incident Updated: API latency"
        assert event_details(event) == [
            ("Severity", "critical"),
            ("Affected", "api, web"),
            ("Severity change", "minor -> critical"),
            ("Added", "web"),
        ]

    def test_system_events(self) -> None:
        """System events use name and type."""
        down = make_system_down(name="api")
        recovered = SystemRecovered(
            name="api", system_type="system", downtime_ms=120_000, last_check=FIXED_TIME
        )

        assert event_title(down) == "System Down: api (system)"
        assert ("Status code", "503") in event_details(down)
        assert event_title(recovered) == "System Recovered: api"
        assert event_details(recovered) == [("Downtime", "2m 0s")]

    def test_slo_units(self) -> None:
        """Uptime is a percentage, response time milliseconds."""
        uptime = SloBreached(entity="api", metric="uptime", target=99.9, actual=99.5, period="30d")
        latency = SloBreached(
            entity="api", metric="response_time", target=200, actual=350, period="7d"
        )

        assert ("Target", "99.9%") in event_details(uptime)
        assert ("Actual", "350ms") in event_details(latency)
        assert event_tone(uptime) == "major"

    def test_maintenance_tone(self) -> None:
        """Maintenance events share one tone."""
        assert event_tone(make_maintenance_scheduled()) == "maintenance"


class TestMessage:
    """Plain-text rendering."""

    def test_format_message_lines(self) -> None:
        """Title, details and URL each take a line."""
        context = NotificationContext(event=make_incident_opened())

        lines = format_message(context).splitlines()

        assert lines[0] == "[MAJOR] Incident: API latency"
        assert "Severity: major" in lines
        assert lines[-1] == "https://status.example.com/incidents/42"

    def test_footer(self) -> None:
        """Organization and environment are joined; nothing configured means no footer."""
        event = make_incident_opened()

        assert footer(NotificationContext(event=event)) is None
        assert (
            footer(NotificationContext(event=event, organization_name="Ex", environment="prod"))
            == "Ex | prod"
        )

    @pytest.mark.parametrize(
        ("severity", "expected"),
        [
            (Severity.CRITICAL, Severity.CRITICAL),
            (Severity.MAJOR, Severity.MAJOR),
            (Severity.MINOR, None),
        ],
    )
    def test_mention_severity(self, severity: Severity, expected: Severity | None) -> None:
        """Only critical and major opened incidents trigger mentions."""
        assert mention_severity(make_incident_opened(severity=severity)) is expected

    def test_no_mentions_for_closed_incidents(self) -> None:
        """Closing an incident never mentions anyone."""
        assert mention_severity(make_incident_closed()) is None
