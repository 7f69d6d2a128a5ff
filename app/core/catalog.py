# ---
# File: app/core/catalog.py
# Purpose: Construction and mutation rules for services and service groups.
#          Pure functions; persistence is the backend's job.
# ---

from datetime import datetime
from typing import Iterable, Optional

from app.core.errors import ValidationError, reject_nulls
from app.services.models import (
    Service,
    ServiceCreateRequest,
    ServiceGroup,
    ServiceGroupCreateRequest,
)
from app.utils.time_utils import generate_id, utcnow

SERVICE_FIELDS = {"name", "description", "status", "groupId", "uptime"}
# groupId and uptime may be cleared with null; the rest may not
SERVICE_REQUIRED_FIELDS = {"name", "description", "status"}
GROUP_FIELDS = {"name", "serviceIds"}


def _check_group(group_id: Optional[str], known_group_ids) -> None:
    if group_id is not None and known_group_ids is not None and group_id not in set(known_group_ids):
        raise ValidationError(f"Unknown service group: {group_id}", field="groupId")


def new_service(data: ServiceCreateRequest, known_group_ids: Optional[Iterable[str]] = None, now: Optional[datetime] = None) -> Service:
    if not data.name.strip():
        raise ValidationError("name is required", field="name")
    _check_group(data.groupId, known_group_ids)
    return Service(
        id=generate_id("srv"),
        name=data.name,
        description=data.description,
        status=data.status,
        groupId=data.groupId,
        uptime=data.uptime,
        lastUpdated=now or utcnow(),
    )


# ---
# Apply a partial change to a service. lastUpdated is refreshed on every
# mutation, including ones that only touch the description.
# ---
def apply_service_update(service: Service, changes: dict, known_group_ids=None, now: Optional[datetime] = None) -> Service:
    unknown = set(changes) - SERVICE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}", field=sorted(unknown)[0])
    reject_nulls(changes, SERVICE_REQUIRED_FIELDS)
    if "name" in changes and not changes["name"].strip():
        raise ValidationError("name is required", field="name")
    if "groupId" in changes:
        _check_group(changes["groupId"], known_group_ids)
    return service.model_copy(update={**changes, "lastUpdated": now or utcnow()})


def new_group(data: ServiceGroupCreateRequest, known_service_ids: Optional[Iterable[str]] = None) -> ServiceGroup:
    if not data.name.strip():
        raise ValidationError("name is required", field="name")
    check_members(data.serviceIds, known_service_ids)
    return ServiceGroup(id=generate_id("grp"), name=data.name, serviceIds=list(data.serviceIds))


def check_members(service_ids: Iterable[str], known_service_ids: Optional[Iterable[str]]) -> None:
    if known_service_ids is None:
        return
    known = set(known_service_ids)
    unknown = [service_id for service_id in service_ids if service_id not in known]
    if unknown:
        raise ValidationError(f"Unknown service id(s): {', '.join(unknown)}", field="serviceIds")


# ---
# Apply a partial change to a group with the same checks as new_group.
# Neither field may be null; an empty serviceIds list clears the members.
# ---
def apply_group_update(group: ServiceGroup, changes: dict, known_service_ids: Optional[Iterable[str]] = None) -> ServiceGroup:
    unknown = set(changes) - GROUP_FIELDS
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}", field=sorted(unknown)[0])
    reject_nulls(changes, GROUP_FIELDS)
    if "name" in changes and not changes["name"].strip():
        raise ValidationError("name is required", field="name")
    if "serviceIds" in changes:
        check_members(changes["serviceIds"], known_service_ids)
        changes = {**changes, "serviceIds": list(changes["serviceIds"])}
    return group.model_copy(update=changes)
