from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from app.utils.time_utils import as_utc, utcnow

# Legacy status names still sent by older clients and backends
LEGACY_STATUS_ALIASES = {
    "degraded": "degraded_performance",
}


# Declaration order is severity order, most severe first
class ServiceStatus(str, Enum):
    MAJOR_OUTAGE = "major_outage"
    PARTIAL_OUTAGE = "partial_outage"
    DEGRADED_PERFORMANCE = "degraded_performance"
    MAINTENANCE = "maintenance"
    OPERATIONAL = "operational"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            canonical = LEGACY_STATUS_ALIASES.get(value.strip().lower())
            if canonical:
                return cls(canonical)
        return None


def normalize_service_status(value):
    if value is None or isinstance(value, ServiceStatus):
        return value
    return ServiceStatus(value)


# Accepts canonical and legacy status names, always yields the canonical member
StatusValue = Annotated[ServiceStatus, BeforeValidator(normalize_service_status)]


class Service(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    description: str = ""
    status: StatusValue = ServiceStatus.OPERATIONAL
    groupId: Optional[str] = Field(default=None, validation_alias=AliasChoices("groupId", "group"))
    uptime: Optional[float] = Field(default=None, ge=0, le=100)
    lastUpdated: datetime = Field(default_factory=utcnow)

    @field_validator("lastUpdated", mode="after")
    @classmethod
    def lastupdated_utc(cls, value):
        return as_utc(value)


class ServiceGroup(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    serviceIds: List[str] = Field(default_factory=list, validation_alias=AliasChoices("serviceIds", "services"))


class ServiceCreateRequest(BaseModel):
    name: str
    description: str = ""
    status: StatusValue = ServiceStatus.OPERATIONAL
    groupId: Optional[str] = None
    uptime: Optional[float] = Field(default=None, ge=0, le=100)


class ServiceUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[StatusValue] = None
    groupId: Optional[str] = None
    uptime: Optional[float] = Field(default=None, ge=0, le=100)


class ServiceGroupCreateRequest(BaseModel):
    name: str
    serviceIds: List[str] = []


class ServiceGroupUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    serviceIds: Optional[List[str]] = None
