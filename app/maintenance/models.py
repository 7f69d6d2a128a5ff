# maintenance/models.py

from datetime import datetime
from typing import ClassVar, List, Optional
from enum import Enum
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.core.events import EventKind, StatusEvent, Update
from app.incidents.models import IncidentSeverity
from app.utils.time_utils import as_utc


class MaintenanceStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Next statuses reachable from each status; terminal statuses map to nothing.
# Cancelling after work has started is not offered.
MAINTENANCE_TRANSITIONS = {
    MaintenanceStatus.SCHEDULED: frozenset({MaintenanceStatus.IN_PROGRESS, MaintenanceStatus.CANCELLED}),
    MaintenanceStatus.IN_PROGRESS: frozenset({MaintenanceStatus.COMPLETED}),
    MaintenanceStatus.COMPLETED: frozenset(),
    MaintenanceStatus.CANCELLED: frozenset(),
}


class MaintenanceUpdate(Update):
    status: MaintenanceStatus


class MaintenanceEvent(StatusEvent):
    kind: ClassVar[EventKind] = EventKind.MAINTENANCE
    id_prefix: ClassVar[str] = "mnt"
    status_enum: ClassVar = MaintenanceStatus
    update_model: ClassVar = MaintenanceUpdate
    terminal_statuses: ClassVar = frozenset({MaintenanceStatus.COMPLETED, MaintenanceStatus.CANCELLED})
    allowed_transitions: ClassVar = MAINTENANCE_TRANSITIONS
    initial_statuses: ClassVar = frozenset({MaintenanceStatus.SCHEDULED})

    status: MaintenanceStatus
    severity: Optional[IncidentSeverity] = None
    scheduledStart: datetime = Field(validation_alias=AliasChoices("scheduledStart", "scheduledStartDate"))
    scheduledEnd: datetime = Field(validation_alias=AliasChoices("scheduledEnd", "scheduledEndDate"))
    updates: List[MaintenanceUpdate]

    @field_validator("scheduledStart", "scheduledEnd", mode="after")
    @classmethod
    def schedule_utc(cls, value):
        return as_utc(value)


class MaintenanceCreate(BaseModel):
    title: str
    description: str
    scheduledStart: datetime
    scheduledEnd: datetime
    affectedServiceIds: List[str] = []
    severity: Optional[IncidentSeverity] = None
    author: Optional[str] = None


class MaintenanceEdit(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    severity: Optional[IncidentSeverity] = None
    affectedServiceIds: Optional[List[str]] = None
    scheduledStart: Optional[datetime] = None
    scheduledEnd: Optional[datetime] = None


class MaintenanceUpdateCreate(BaseModel):
    message: str
    status: MaintenanceStatus
    author: Optional[str] = None


# Status-only change; the note text is generated
class MaintenanceStatusChange(BaseModel):
    status: MaintenanceStatus
    author: Optional[str] = None


class MaintenanceAppendResponse(BaseModel):
    event: MaintenanceEvent
    warnings: List[str] = Field(default_factory=list)
