# incidents/models.py

from typing import ClassVar, List, Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

from app.core.events import EventKind, StatusEvent, Update


class IncidentStatus(str, Enum):
    INVESTIGATING = "investigating"
    IDENTIFIED = "identified"
    MONITORING = "monitoring"
    RESOLVED = "resolved"


class IncidentSeverity(str, Enum):
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


class IncidentUpdate(Update):
    status: IncidentStatus


class Incident(StatusEvent):
    kind: ClassVar[EventKind] = EventKind.INCIDENT
    id_prefix: ClassVar[str] = "inc"
    status_enum: ClassVar = IncidentStatus
    update_model: ClassVar = IncidentUpdate
    terminal_statuses: ClassVar = frozenset({IncidentStatus.RESOLVED})

    status: IncidentStatus
    severity: IncidentSeverity = IncidentSeverity.MINOR
    updates: List[IncidentUpdate]


class IncidentCreate(BaseModel):
    title: str
    description: str
    status: IncidentStatus = IncidentStatus.INVESTIGATING
    severity: IncidentSeverity = IncidentSeverity.MINOR
    affectedServiceIds: List[str] = []
    author: Optional[str] = None


# Status is deliberately absent: it only changes through the update log
class IncidentEdit(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    severity: Optional[IncidentSeverity] = None
    affectedServiceIds: Optional[List[str]] = None


class IncidentUpdateCreate(BaseModel):
    message: str
    status: IncidentStatus
    author: Optional[str] = None


class IncidentAppendResponse(BaseModel):
    event: Incident
    warnings: List[str] = Field(default_factory=list)
