# ---
# File: incidents/routes.py
# Purpose: FastAPI routes for creating, retrieving, editing, and adding updates to incidents
# ---

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
import logging

from app import config
from app.backend.base import StatusBackend
from app.core.timeline import (
    append_update_with_warnings,
    apply_event_edit,
    create_incident as build_incident,
    filter_events,
)
from app.db import get_backend
from app.incidents import models as incident_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/incidents", tags=["Incidents"])


async def _service_ids(backend: StatusBackend) -> List[str]:
    return [service.id for service in await backend.service.find_many()]


# ---
# Create a new incident.
# The description becomes the first entry of the incident's timeline,
# tagged with the initial status. Affected services must exist.
# ---
@router.post("", response_model=incident_schemas.Incident)
async def create_incident(payload: incident_schemas.IncidentCreate, backend: StatusBackend = Depends(get_backend)):
    incident = build_incident(
        payload.title,
        payload.description,
        payload.status,
        payload.severity,
        payload.affectedServiceIds,
        payload.author or config.DEFAULT_AUTHOR,
        known_service_ids=await _service_ids(backend),
    )
    return await backend.incident.create(incident)


# ---
# Get all incidents, optionally filtered by a search query
# matched against title and description.
# ---
@router.get("", response_model=List[incident_schemas.Incident])
async def get_incidents(q: Optional[str] = Query(None), backend: StatusBackend = Depends(get_backend)):
    return filter_events(await backend.incident.find_many(), q)


@router.get("/{incident_id}", response_model=incident_schemas.Incident)
async def get_incident(incident_id: str, backend: StatusBackend = Depends(get_backend)):
    incident = await backend.incident.find_unique(incident_id)
    if not incident:
        raise HTTPException(status_code=404, detail="Incident not found")
    return incident


# ---
# Edit the descriptive fields of an incident.
# Status is not editable here; it moves only through /updates.
# ---
@router.patch("/{incident_id}", response_model=incident_schemas.Incident)
async def update_incident(
    incident_id: str,
    payload: incident_schemas.IncidentEdit,
    backend: StatusBackend = Depends(get_backend),
):
    existing = await backend.incident.find_unique(incident_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Incident not found")

    changes = payload.model_dump(exclude_unset=True)
    known = await _service_ids(backend) if "affectedServiceIds" in changes else None
    edited = apply_event_edit(existing, changes, known_service_ids=known)

    updated = await backend.incident.update(
        incident_id,
        {**{field: getattr(edited, field) for field in changes}, "updatedAt": edited.updatedAt},
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Incident not found")
    return updated


# ---
# Append an update to an incident's timeline.
# The incident's status follows the new update. Appending to a resolved
# incident is allowed and reported back in `warnings`.
# ---
@router.post("/{incident_id}/updates", response_model=incident_schemas.IncidentAppendResponse)
async def add_incident_update(
    incident_id: str,
    payload: incident_schemas.IncidentUpdateCreate,
    backend: StatusBackend = Depends(get_backend),
):
    incident = await backend.incident.find_unique(incident_id)
    if not incident:
        raise HTTPException(status_code=404, detail="Incident not found")

    appended, warnings = append_update_with_warnings(
        incident, payload.message, payload.status, payload.author or config.DEFAULT_AUTHOR
    )
    stored = await backend.incident.append_update(incident_id, appended.updates[-1])
    if not stored:
        raise HTTPException(status_code=404, detail="Incident not found")
    for warning in warnings:
        logger.warning(f"[INCIDENTS] {warning}")
    return incident_schemas.IncidentAppendResponse(event=stored, warnings=warnings)


@router.delete("/{incident_id}")
async def delete_incident(incident_id: str, backend: StatusBackend = Depends(get_backend)):
    if not await backend.incident.delete(incident_id):
        raise HTTPException(status_code=404, detail="Incident not found")
    return {"success": True}
