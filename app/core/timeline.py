# ---
# File: app/core/timeline.py
# Purpose: Incident and maintenance timeline operations. Events carry an
#          append-only list of updates and their status always mirrors the
#          latest update. Every operation returns a new event.
# ---

from datetime import datetime
from typing import Iterable, List, Optional, Type, TypeVar
import logging
import warnings

from app.core.errors import ConsistencyWarning, ValidationError, reject_nulls
from app.core.events import EventKind, StatusEvent
from app.incidents.models import Incident
from app.maintenance.models import MaintenanceEvent, MaintenanceStatus
from app.utils.time_utils import as_utc, generate_id, utcnow

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=StatusEvent)

EVENT_MODELS = {
    EventKind.INCIDENT: Incident,
    EventKind.MAINTENANCE: MaintenanceEvent,
}

# Fields an edit may touch; status and the log only move through append_update
EDITABLE_FIELDS = {
    EventKind.INCIDENT: {"title", "description", "severity", "affectedServiceIds"},
    EventKind.MAINTENANCE: {
        "title", "description", "severity", "affectedServiceIds", "scheduledStart", "scheduledEnd",
    },
}

# Editable fields that cannot be cleared; maintenance severity is optional
REQUIRED_EDIT_FIELDS = {
    EventKind.INCIDENT: {"title", "description", "severity", "affectedServiceIds"},
    EventKind.MAINTENANCE: {"title", "description", "affectedServiceIds", "scheduledStart", "scheduledEnd"},
}


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return value


def _coerce_status(model: Type[StatusEvent], status):
    try:
        return model.status_enum(status)
    except ValueError:
        allowed = ", ".join(s.value for s in model.status_enum)
        raise ValidationError(
            f"'{status}' is not a valid {model.kind.value} status (expected one of: {allowed})",
            field="status",
        ) from None


def _check_affected_services(affected_service_ids, known_service_ids) -> List[str]:
    affected = list(affected_service_ids or [])
    if known_service_ids is not None:
        known = set(known_service_ids)
        unknown = [service_id for service_id in affected if service_id not in known]
        if unknown:
            raise ValidationError(
                f"Unknown affected service id(s): {', '.join(unknown)}",
                field="affectedServiceIds",
            )
    return affected


def _check_schedule(start: datetime, end: datetime) -> None:
    if as_utc(end) <= as_utc(start):
        raise ValidationError("scheduledEnd must be after scheduledStart", field="scheduledEnd")


def create_event(
    kind: EventKind,
    title: str,
    description: str,
    initial_status,
    severity,
    affected_service_ids: Iterable[str],
    author: str,
    known_service_ids: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
    **fields,
) -> StatusEvent:
    """
    Build a new event whose timeline holds exactly one update: the
    description, tagged with the initial status.

    `known_service_ids`, when given, is the set of service ids the affected
    list is checked against. Extra keyword fields go straight onto the
    model (`scheduledStart` and `scheduledEnd` for maintenance).

    Raises ValidationError for a blank title or description, a status outside
    the event's domain, an unknown affected service, a maintenance event not
    starting as `scheduled`, or a maintenance window that ends before it starts.
    """
    model = EVENT_MODELS[EventKind(kind)]
    _require_text(title, "title")
    _require_text(description, "description")
    status = _coerce_status(model, initial_status)
    if model.initial_statuses is not None and status not in model.initial_statuses:
        raise ValidationError(
            f"A new {model.kind.value} must start as one of: "
            f"{', '.join(s.value for s in model.initial_statuses)}",
            field="status",
        )
    affected = _check_affected_services(affected_service_ids, known_service_ids)
    if model.kind == EventKind.MAINTENANCE:
        _check_schedule(fields["scheduledStart"], fields["scheduledEnd"])

    now = now or utcnow()
    first_update = model.update_model(
        id=generate_id("upd"),
        message=description,
        status=status,
        author=author,
        createdAt=now,
    )
    payload = dict(
        id=generate_id(model.id_prefix),
        title=title,
        description=description,
        status=status,
        affectedServiceIds=affected,
        createdAt=now,
        updatedAt=now,
        updates=[first_update],
        **fields,
    )
    if severity is not None:
        payload["severity"] = severity
    event = model(**payload)
    logger.info(f"[TIMELINE] Created {model.kind.value} {event.id} as {status.value}")
    return event


def create_incident(title, description, status, severity, affected_service_ids, author, **kwargs) -> Incident:
    return create_event(
        EventKind.INCIDENT, title, description, status, severity, affected_service_ids, author, **kwargs
    )


def create_maintenance(
    title, description, scheduled_start, scheduled_end, affected_service_ids, author, severity=None, **kwargs
) -> MaintenanceEvent:
    return create_event(
        EventKind.MAINTENANCE,
        title,
        description,
        MaintenanceStatus.SCHEDULED,
        severity,
        affected_service_ids,
        author,
        scheduledStart=scheduled_start,
        scheduledEnd=scheduled_end,
        **kwargs,
    )


def append_update(event: E, message: str, new_status, author: str, now: Optional[datetime] = None) -> E:
    """
    Append one update and return the new event; `event` itself is not modified.

    The result's `status` and `updatedAt` mirror the appended update.

    Repeating the current status records a note and is always allowed.
    Events with a transition table (maintenance) reject other moves out of a
    non-terminal status with ValidationError. Appending to an event that is
    already terminal goes through but emits a ConsistencyWarning so callers
    can ask the operator to confirm the re-open.
    """
    model = type(event)
    _require_text(message, "message")
    status = _coerce_status(model, new_status)
    current = current_status(event)

    if current in model.terminal_statuses:
        warnings.warn(
            ConsistencyWarning(
                f"{model.kind.value.capitalize()} {event.id} is already {current.value}; "
                f"appending a '{status.value}' update"
            ),
            stacklevel=2,
        )
        logger.warning(f"[TIMELINE] Append to terminal {model.kind.value} {event.id} ({current.value})")
    elif status != current and model.allowed_transitions is not None:
        allowed = model.allowed_transitions.get(current, frozenset())
        if status not in allowed:
            raise ValidationError(
                f"Cannot move {model.kind.value} from {current.value} to {status.value}",
                field="status",
            )

    now = now or utcnow()
    update = model.update_model(
        id=generate_id("upd"),
        message=message,
        status=status,
        author=author,
        createdAt=now,
    )
    logger.info(f"[TIMELINE] {model.kind.value} {event.id}: {current.value} -> {status.value}")
    return event.model_copy(
        update={
            "updates": [*event.updates, update],
            "status": status,
            "updatedAt": now,
        }
    )


def current_status(event: StatusEvent):
    return event.updates[-1].status


def is_active(event: StatusEvent) -> bool:
    return current_status(event) not in type(event).terminal_statuses


def is_upcoming(event: StatusEvent, now: Optional[datetime] = None) -> bool:
    if not isinstance(event, MaintenanceEvent):
        return False
    now = as_utc(now) if now else utcnow()
    return current_status(event) == MaintenanceStatus.SCHEDULED and event.scheduledStart > now


def is_in_progress(event: StatusEvent) -> bool:
    return isinstance(event, MaintenanceEvent) and current_status(event) == MaintenanceStatus.IN_PROGRESS


# ---
# Apply a partial edit of the descriptive fields and refresh updatedAt.
# Status is rejected here: it only moves through the update log.
# ---
def apply_event_edit(event: E, changes: dict, now: Optional[datetime] = None, known_service_ids=None) -> E:
    model = type(event)
    forbidden = {"status", "updates"} & set(changes)
    if forbidden:
        raise ValidationError(
            f"{', '.join(sorted(forbidden))} cannot be edited directly; append an update instead",
            field=sorted(forbidden)[0],
        )
    unknown = set(changes) - EDITABLE_FIELDS[model.kind]
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}", field=sorted(unknown)[0])
    reject_nulls(changes, REQUIRED_EDIT_FIELDS[model.kind])

    for field in ("title", "description"):
        if field in changes:
            _require_text(changes[field], field)
    if "affectedServiceIds" in changes:
        changes = {
            **changes,
            "affectedServiceIds": _check_affected_services(changes["affectedServiceIds"], known_service_ids),
        }
    if model.kind == EventKind.MAINTENANCE and ({"scheduledStart", "scheduledEnd"} & set(changes)):
        start = as_utc(changes.get("scheduledStart") or event.scheduledStart)
        end = as_utc(changes.get("scheduledEnd") or event.scheduledEnd)
        _check_schedule(start, end)
        changes = {**changes, "scheduledStart": start, "scheduledEnd": end}

    return event.model_copy(update={**changes, "updatedAt": now or utcnow()})


def status_change_message(event_or_kind, status) -> str:
    kind = event_or_kind.kind if isinstance(event_or_kind, StatusEvent) else EventKind(event_or_kind)
    value = status.value if hasattr(status, "value") else str(status)
    return f"{kind.value.capitalize()} status changed to {value.replace('_', ' ')}."


# Case-insensitive match on title or description; an empty query keeps everything
def filter_events(events: Iterable[E], query: Optional[str]) -> List[E]:
    if not query:
        return list(events)
    needle = query.lower()
    return [e for e in events if needle in e.title.lower() or needle in e.description.lower()]


# ---
# Run append_update and hand back any ConsistencyWarning messages alongside
# the new event, for callers that report warnings in a response body.
# Other warnings are re-emitted unchanged.
# ---
def append_update_with_warnings(event: E, message: str, new_status, author: str, now: Optional[datetime] = None):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        updated = append_update(event, message, new_status, author, now=now)

    messages = []
    for warning in caught:
        if issubclass(warning.category, ConsistencyWarning):
            messages.append(str(warning.message))
        else:
            warnings.warn_explicit(warning.message, warning.category, warning.filename, warning.lineno)
    return updated, messages
