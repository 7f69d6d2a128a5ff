# ---
# File: maintenance/routes.py
# Purpose: FastAPI routes for scheduling maintenance windows and moving them
#          through scheduled -> in_progress -> completed (or cancelled)
# ---

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
import logging

from app import config
from app.backend.base import StatusBackend
from app.core.timeline import (
    append_update_with_warnings,
    apply_event_edit,
    create_maintenance as build_maintenance,
    filter_events,
    status_change_message,
)
from app.db import get_backend
from app.maintenance import models as maintenance_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/maintenance", tags=["Maintenance"])


async def _service_ids(backend: StatusBackend) -> List[str]:
    return [service.id for service in await backend.service.find_many()]


async def _append(backend: StatusBackend, maintenance_id: str, message: str, status, author: Optional[str]):
    event = await backend.maintenance.find_unique(maintenance_id)
    if not event:
        raise HTTPException(status_code=404, detail="Maintenance event not found")

    appended, warnings = append_update_with_warnings(event, message, status, author or config.DEFAULT_AUTHOR)
    stored = await backend.maintenance.append_update(maintenance_id, appended.updates[-1])
    if not stored:
        raise HTTPException(status_code=404, detail="Maintenance event not found")
    for warning in warnings:
        logger.warning(f"[MAINTENANCE] {warning}")
    return maintenance_schemas.MaintenanceAppendResponse(event=stored, warnings=warnings)


# ---
# Schedule a new maintenance window. It always starts as "scheduled",
# and the window must end after it starts.
# ---
@router.post("", response_model=maintenance_schemas.MaintenanceEvent)
async def create_maintenance(
    payload: maintenance_schemas.MaintenanceCreate,
    backend: StatusBackend = Depends(get_backend),
):
    event = build_maintenance(
        payload.title,
        payload.description,
        payload.scheduledStart,
        payload.scheduledEnd,
        payload.affectedServiceIds,
        payload.author or config.DEFAULT_AUTHOR,
        severity=payload.severity,
        known_service_ids=await _service_ids(backend),
    )
    return await backend.maintenance.create(event)


@router.get("", response_model=List[maintenance_schemas.MaintenanceEvent])
async def get_maintenance_events(q: Optional[str] = Query(None), backend: StatusBackend = Depends(get_backend)):
    return filter_events(await backend.maintenance.find_many(), q)


@router.get("/{maintenance_id}", response_model=maintenance_schemas.MaintenanceEvent)
async def get_maintenance_event(maintenance_id: str, backend: StatusBackend = Depends(get_backend)):
    event = await backend.maintenance.find_unique(maintenance_id)
    if not event:
        raise HTTPException(status_code=404, detail="Maintenance event not found")
    return event


# ---
# Edit title, description, affected services, or the schedule.
# Status changes go through /updates or /status.
# ---
@router.patch("/{maintenance_id}", response_model=maintenance_schemas.MaintenanceEvent)
async def update_maintenance_event(
    maintenance_id: str,
    payload: maintenance_schemas.MaintenanceEdit,
    backend: StatusBackend = Depends(get_backend),
):
    existing = await backend.maintenance.find_unique(maintenance_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Maintenance event not found")

    changes = payload.model_dump(exclude_unset=True)
    known = await _service_ids(backend) if "affectedServiceIds" in changes else None
    edited = apply_event_edit(existing, changes, known_service_ids=known)

    updated = await backend.maintenance.update(
        maintenance_id,
        {**{field: getattr(edited, field) for field in changes}, "updatedAt": edited.updatedAt},
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Maintenance event not found")
    return updated


@router.post("/{maintenance_id}/updates", response_model=maintenance_schemas.MaintenanceAppendResponse)
async def add_maintenance_update(
    maintenance_id: str,
    payload: maintenance_schemas.MaintenanceUpdateCreate,
    backend: StatusBackend = Depends(get_backend),
):
    return await _append(backend, maintenance_id, payload.message, payload.status, payload.author)


# ---
# Start, complete, or cancel a maintenance window.
# Records an update with a generated note, e.g.
# "Maintenance status changed to in progress."
# ---
@router.post("/{maintenance_id}/status", response_model=maintenance_schemas.MaintenanceAppendResponse)
async def change_maintenance_status(
    maintenance_id: str,
    payload: maintenance_schemas.MaintenanceStatusChange,
    backend: StatusBackend = Depends(get_backend),
):
    message = status_change_message("maintenance", payload.status)
    return await _append(backend, maintenance_id, message, payload.status, payload.author)


@router.delete("/{maintenance_id}")
async def delete_maintenance_event(maintenance_id: str, backend: StatusBackend = Depends(get_backend)):
    if not await backend.maintenance.delete(maintenance_id):
        raise HTTPException(status_code=404, detail="Maintenance event not found")
    return {"success": True}
