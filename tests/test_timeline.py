"""
Tests for the incident/maintenance timeline model.
"""

from datetime import timedelta
import warnings

import pytest

from app.core.errors import ConsistencyWarning, ValidationError
from app.core.events import EventKind
from app.core.timeline import (
    append_update,
    append_update_with_warnings,
    apply_event_edit,
    create_event,
    create_incident,
    create_maintenance,
    current_status,
    filter_events,
    is_active,
    is_in_progress,
    is_upcoming,
    status_change_message,
)
from app.incidents.models import Incident, IncidentSeverity, IncidentStatus
from app.maintenance.models import MaintenanceEvent, MaintenanceStatus
from conftest import NOW


def _incident(**kwargs):
    defaults = dict(
        title="API slow",
        description="investigating latency",
        status="investigating",
        severity="minor",
        affected_service_ids=["svc_1"],
        author="op",
        now=NOW,
    )
    defaults.update(kwargs)
    return create_incident(
        defaults.pop("title"),
        defaults.pop("description"),
        defaults.pop("status"),
        defaults.pop("severity"),
        defaults.pop("affected_service_ids"),
        defaults.pop("author"),
        **defaults,
    )


def _maintenance(start_in=timedelta(days=1), length=timedelta(hours=2)):
    return create_maintenance(
        "Database Upgrade",
        "Upgrading the primary cluster",
        NOW + start_in,
        NOW + start_in + length,
        ["svc_3"],
        "op",
        now=NOW,
    )


class TestCreateEvent:

    def test_create_records_initial_update(self):
        incident = _incident()

        assert isinstance(incident, Incident)
        assert incident.id.startswith("inc_")
        assert incident.status == IncidentStatus.INVESTIGATING
        assert incident.severity == IncidentSeverity.MINOR
        assert incident.createdAt == incident.updatedAt == NOW
        assert len(incident.updates) == 1
        first = incident.updates[0]
        assert first.message == "investigating latency"
        assert first.status == IncidentStatus.INVESTIGATING
        assert first.author == "op"
        assert first.createdAt == NOW

    def test_incident_may_start_in_any_status(self):
        incident = _incident(status="monitoring")
        assert current_status(incident) == IncidentStatus.MONITORING

    @pytest.mark.parametrize("field,kwargs", [
        ("title", {"title": ""}),
        ("title", {"title": "   "}),
        ("description", {"description": ""}),
    ])
    def test_blank_required_fields(self, field, kwargs):
        with pytest.raises(ValidationError) as exc_info:
            _incident(**kwargs)
        assert exc_info.value.field == field

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            _incident(status="on_fire")

    def test_unknown_affected_service(self):
        with pytest.raises(ValidationError) as exc_info:
            _incident(affected_service_ids=["svc_1", "svc_9"], known_service_ids=["svc_1", "svc_2"])
        assert "svc_9" in exc_info.value.message

    def test_known_affected_services_pass(self):
        incident = _incident(known_service_ids=["svc_1"])
        assert incident.affectedServiceIds == ["svc_1"]

    def test_generic_create_event(self):
        event = create_event(EventKind.INCIDENT, "API slow", "investigating latency", "investigating", "minor", ["svc_1"], "op")
        assert isinstance(event, Incident)

    def test_maintenance_starts_scheduled(self):
        event = _maintenance()

        assert isinstance(event, MaintenanceEvent)
        assert event.id.startswith("mnt_")
        assert event.status == MaintenanceStatus.SCHEDULED
        assert event.updates[0].status == MaintenanceStatus.SCHEDULED

    def test_maintenance_cannot_start_in_progress(self):
        with pytest.raises(ValidationError):
            create_event(
                EventKind.MAINTENANCE, "Upgrade", "Upgrade db", "in_progress", None, [], "op",
                scheduledStart=NOW, scheduledEnd=NOW + timedelta(hours=1),
            )

    def test_maintenance_window_must_end_after_start(self):
        with pytest.raises(ValidationError) as exc_info:
            _maintenance(length=timedelta(0))
        assert exc_info.value.field == "scheduledEnd"


class TestAppendUpdate:

    def test_resolving_closes_incident(self):
        event = _incident()
        event = append_update(event, "fixed", "resolved", "op")

        assert event.status == IncidentStatus.RESOLVED
        assert len(event.updates) == 2
        assert is_active(event) is False

    def test_append_is_monotonic_and_ordered(self):
        event = _incident()
        steps = ["identified", "monitoring", "investigating", "monitoring", "identified"]
        for i, status in enumerate(steps):
            event = append_update(event, f"step {i}", status, "op", now=NOW + timedelta(minutes=i + 1))
            assert len(event.updates) == i + 2
            assert current_status(event) == event.status

        assert [u.message for u in event.updates[1:]] == [f"step {i}" for i in range(len(steps))]
        assert event.updatedAt == NOW + timedelta(minutes=len(steps))

    def test_order_is_append_order_not_timestamp(self):
        event = _incident()
        event = append_update(event, "later clock", "identified", "op", now=NOW + timedelta(hours=2))
        event = append_update(event, "earlier clock", "monitoring", "op", now=NOW + timedelta(hours=1))

        assert event.status == IncidentStatus.MONITORING
        assert event.updates[-1].message == "earlier clock"

    def test_input_event_is_not_modified(self):
        event = _incident()
        appended = append_update(event, "found it", "identified", "op")

        assert len(event.updates) == 1
        assert event.status == IncidentStatus.INVESTIGATING
        assert appended is not event

    def test_blank_message_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            append_update(_incident(), "  ", "identified", "op")
        assert exc_info.value.field == "message"

    def test_status_outside_domain_rejected(self):
        with pytest.raises(ValidationError):
            append_update(_incident(), "hmm", "in_progress", "op")

    def test_append_to_resolved_warns_but_proceeds(self):
        event = append_update(_incident(), "fixed", "resolved", "op")

        with pytest.warns(ConsistencyWarning):
            reopened = append_update(event, "it is back", "investigating", "op")

        assert reopened.status == IncidentStatus.INVESTIGATING
        assert is_active(reopened)

    def test_no_warning_for_active_event(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            append_update(_incident(), "found it", "identified", "op")

    def test_with_warnings_collects_messages(self):
        event = append_update(_incident(), "fixed", "resolved", "op")
        updated, messages = append_update_with_warnings(event, "note", "resolved", "op")

        assert len(updated.updates) == 3
        assert len(messages) == 1
        assert "already resolved" in messages[0]


class TestMaintenanceTransitions:

    def test_happy_path(self):
        event = _maintenance()
        event = append_update(event, "started", "in_progress", "op")
        assert is_in_progress(event)
        event = append_update(event, "done", "completed", "op")

        assert event.status == MaintenanceStatus.COMPLETED
        assert not is_active(event)

    def test_cancel_while_scheduled(self):
        event = append_update(_maintenance(), "called off", "cancelled", "op")
        assert not is_active(event)

    def test_cancel_after_start_rejected(self):
        event = append_update(_maintenance(), "started", "in_progress", "op")
        with pytest.raises(ValidationError):
            append_update(event, "called off", "cancelled", "op")

    def test_skip_to_completed_rejected(self):
        with pytest.raises(ValidationError):
            append_update(_maintenance(), "done", "completed", "op")

    def test_note_with_same_status_allowed(self):
        event = append_update(_maintenance(), "reminder", "scheduled", "op")
        assert len(event.updates) == 2

    def test_reopen_terminal_maintenance_warns(self):
        event = append_update(_maintenance(), "called off", "cancelled", "op")
        with pytest.warns(ConsistencyWarning):
            event = append_update(event, "back on", "scheduled", "op")
        assert event.status == MaintenanceStatus.SCHEDULED


class TestActivity:

    @pytest.mark.parametrize("status,active", [
        ("investigating", True),
        ("identified", True),
        ("monitoring", True),
        ("resolved", False),
    ])
    def test_incident_is_active(self, status, active):
        assert is_active(_incident(status=status)) is active

    def test_upcoming(self):
        event = _maintenance(start_in=timedelta(hours=3))

        assert is_upcoming(event, now=NOW)
        assert not is_upcoming(event, now=NOW + timedelta(hours=4))

    def test_started_maintenance_is_not_upcoming(self):
        event = append_update(_maintenance(), "started early", "in_progress", "op")
        assert not is_upcoming(event, now=NOW)

    def test_incident_is_never_upcoming(self):
        assert not is_upcoming(_incident(), now=NOW)


class TestEditAndSearch:

    def test_edit_refreshes_updated_at(self):
        event = _incident()
        later = NOW + timedelta(minutes=5)
        edited = apply_event_edit(event, {"title": "API very slow", "severity": IncidentSeverity.MAJOR}, now=later)

        assert edited.title == "API very slow"
        assert edited.severity == IncidentSeverity.MAJOR
        assert edited.updatedAt == later
        assert edited.updates == event.updates

    def test_edit_cannot_touch_status(self):
        with pytest.raises(ValidationError):
            apply_event_edit(_incident(), {"status": "resolved"})

    @pytest.mark.parametrize("field", ["severity", "title", "affectedServiceIds"])
    def test_edit_rejects_null(self, field):
        with pytest.raises(ValidationError) as exc_info:
            apply_event_edit(_incident(), {field: None})
        assert exc_info.value.field == field

    def test_maintenance_severity_may_be_cleared(self):
        event = apply_event_edit(_maintenance(), {"severity": IncidentSeverity.MINOR})
        assert apply_event_edit(event, {"severity": None}).severity is None

    def test_edit_rejects_null_schedule(self):
        with pytest.raises(ValidationError) as exc_info:
            apply_event_edit(_maintenance(), {"scheduledEnd": None})
        assert exc_info.value.field == "scheduledEnd"

    def test_edit_schedule_checked(self):
        event = _maintenance()
        with pytest.raises(ValidationError):
            apply_event_edit(event, {"scheduledEnd": event.scheduledStart - timedelta(minutes=1)})

    def test_status_change_message(self):
        assert status_change_message("maintenance", MaintenanceStatus.IN_PROGRESS) == (
            "Maintenance status changed to in progress."
        )

    def test_filter_events(self):
        events = [_incident(title="API slow"), _incident(title="Login errors", description="Auth failing")]

        assert [e.title for e in filter_events(events, "api")] == ["API slow"]
        assert [e.title for e in filter_events(events, "AUTH")] == ["Login errors"]
        assert len(filter_events(events, None)) == 2
