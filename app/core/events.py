# ---
# File: app/core/events.py
# Purpose: Shared schema for incidents and maintenance events: an event entity
#          carrying an ordered, append-only log of status-tagged updates.
# ---

from datetime import datetime
from enum import Enum
from typing import ClassVar, FrozenSet, List, Mapping, Optional, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from app.utils.time_utils import as_utc, generate_id, utcnow

# Author recorded on updates synthesized from legacy records without a log
LEGACY_AUTHOR = "System Administrator"


class EventKind(str, Enum):
    INCIDENT = "incident"
    MAINTENANCE = "maintenance"


class Update(BaseModel):
    """
    One entry in an event's timeline. Immutable once created; the position
    in the parent's `updates` list is its creation order.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(default_factory=lambda: generate_id("upd"), validation_alias=AliasChoices("id", "_id"))
    message: str
    status: str
    author: str = Field(validation_alias=AliasChoices("author", "user", "createdBy"))
    createdAt: datetime = Field(default_factory=utcnow)

    @field_validator("createdAt", mode="after")
    @classmethod
    def created_at_utc(cls, value):
        return as_utc(value)


class StatusEvent(BaseModel):
    """
    Base for Incident and MaintenanceEvent.

    Subclasses narrow `status` and `updates` to their own status domain and
    declare the domain's rules as class variables:

        kind                -- EventKind tag
        id_prefix           -- prefix for generated ids
        status_enum         -- the status Enum
        update_model        -- the Update subclass used in `updates`
        terminal_statuses   -- statuses after which the event is closed
        allowed_transitions -- next-status table, or None when any move is allowed
        initial_statuses    -- statuses an event may be created in, or None for any
    """

    model_config = ConfigDict(from_attributes=True)

    kind: ClassVar[EventKind]
    id_prefix: ClassVar[str]
    status_enum: ClassVar[Type[Enum]]
    update_model: ClassVar[Type[Update]] = Update
    terminal_statuses: ClassVar[FrozenSet] = frozenset()
    allowed_transitions: ClassVar[Optional[Mapping]] = None
    initial_statuses: ClassVar[Optional[FrozenSet]] = None

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    title: str
    description: str = ""
    status: str
    severity: Optional[str] = None
    affectedServiceIds: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("affectedServiceIds", "affectedServices"),
    )
    createdAt: datetime = Field(default_factory=utcnow)
    updatedAt: datetime = Field(default_factory=utcnow)
    updates: List[Update]

    # ---
    # Records written before events carried a timeline (the old maintenance
    # shape) have no `updates`. Their creation is the implicit first update.
    # ---
    @model_validator(mode="before")
    @classmethod
    def synthesize_initial_update(cls, data):
        if isinstance(data, dict) and "updates" not in data:
            data = dict(data)
            initial = {
                "message": data.get("description") or data.get("title", ""),
                "status": data.get("status"),
                "author": data.get("createdByUserId") or LEGACY_AUTHOR,
            }
            if data.get("createdAt") is not None:
                initial["createdAt"] = data["createdAt"]
            data["updates"] = [initial]
        return data

    @field_validator("createdAt", "updatedAt", mode="after")
    @classmethod
    def timestamps_utc(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def check_timeline(self):
        if not self.updates:
            raise ValueError("event must carry at least one update")
        if self.status != self.updates[-1].status:
            raise ValueError(
                f"event status '{self.status}' does not match latest update status "
                f"'{self.updates[-1].status}'"
            )
        return self
