# ---
# File: services/routes.py
# Purpose: FastAPI routes for managing services and service groups
# ---

from fastapi import APIRouter, Depends, HTTPException
from typing import List
import logging

from app.backend.base import StatusBackend
from app.core.catalog import apply_group_update, apply_service_update, new_group, new_service
from app.db import get_backend
from .models import (
    Service,
    ServiceCreateRequest,
    ServiceGroup,
    ServiceGroupCreateRequest,
    ServiceGroupUpdateRequest,
    ServiceUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/services", tags=["Services"])
groups_router = APIRouter(prefix="/api/service-groups", tags=["Service Groups"])


async def _group_ids(backend: StatusBackend) -> List[str]:
    return [group.id for group in await backend.group.find_many()]


# ---
# Create a new service.
# Validates the optional group reference against known groups,
# stamps lastUpdated, and stores the service through the backend.
# ---
@router.post("", response_model=Service)
async def create_service(data: ServiceCreateRequest, backend: StatusBackend = Depends(get_backend)):
    service = new_service(data, known_group_ids=await _group_ids(backend))
    created = await backend.service.create(service)
    logger.info(f"[SERVICES] Created service {created.id} ({created.name}) as {created.status.value}")
    return created


# ---
# Retrieve all services, in backend order.
# ---
@router.get("", response_model=List[Service])
async def get_services(backend: StatusBackend = Depends(get_backend)):
    return await backend.service.find_many()


# ---
# Retrieve a single service by its serviceId, or 404.
# ---
@router.get("/{serviceId}", response_model=Service)
async def get_service(serviceId: str, backend: StatusBackend = Depends(get_backend)):
    service = await backend.service.find_unique(serviceId)
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


# ---
# Update a service by its serviceId.
# Accepts partial update data, applies only the provided fields,
# refreshes lastUpdated, and returns the stored service.
# ---
@router.patch("/{serviceId}", response_model=Service)
async def update_service(serviceId: str, data: ServiceUpdateRequest, backend: StatusBackend = Depends(get_backend)):
    service = await backend.service.find_unique(serviceId)
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")

    changes = data.model_dump(exclude_unset=True)
    known_groups = await _group_ids(backend) if "groupId" in changes else None
    updated = apply_service_update(service, changes, known_group_ids=known_groups)

    stored = await backend.service.update(
        serviceId,
        {**{field: getattr(updated, field) for field in changes}, "lastUpdated": updated.lastUpdated},
    )
    if not stored:
        raise HTTPException(status_code=404, detail="Service not found")
    return stored


# ---
# Delete a service by its serviceId.
# Group membership cleanup is the backend's responsibility.
# ---
@router.delete("/{serviceId}")
async def delete_service(serviceId: str, backend: StatusBackend = Depends(get_backend)):
    if not await backend.service.delete(serviceId):
        raise HTTPException(status_code=404, detail="Service not found")
    logger.info(f"[SERVICES] Deleted service {serviceId}")
    return {"success": True}


@groups_router.get("", response_model=List[ServiceGroup])
async def get_groups(backend: StatusBackend = Depends(get_backend)):
    return await backend.group.find_many()


@groups_router.post("", response_model=ServiceGroup)
async def create_group(data: ServiceGroupCreateRequest, backend: StatusBackend = Depends(get_backend)):
    services = await backend.service.find_many()
    group = new_group(data, known_service_ids=[s.id for s in services])
    return await backend.group.create(group)


# ---
# Rename a group or replace its member list.
# Same name and member checks as group creation.
# ---
@groups_router.patch("/{groupId}", response_model=ServiceGroup)
async def update_group(groupId: str, data: ServiceGroupUpdateRequest, backend: StatusBackend = Depends(get_backend)):
    group = await backend.group.find_unique(groupId)
    if not group:
        raise HTTPException(status_code=404, detail="Service group not found")

    changes = data.model_dump(exclude_unset=True)
    known_services = [s.id for s in await backend.service.find_many()] if changes.get("serviceIds") else None
    updated = apply_group_update(group, changes, known_service_ids=known_services)

    stored = await backend.group.update(groupId, {field: getattr(updated, field) for field in changes})
    if not stored:
        raise HTTPException(status_code=404, detail="Service group not found")
    return stored


# ---
# Delete a group. Its services are left in place, ungrouped.
# ---
@groups_router.delete("/{groupId}")
async def delete_group(groupId: str, backend: StatusBackend = Depends(get_backend)):
    if not await backend.group.delete(groupId):
        raise HTTPException(status_code=404, detail="Service group not found")
    return {"success": True}
