# ---
# File: app/status/routes.py
# Purpose: Public, read-only status page endpoint
# ---

from fastapi import APIRouter, Depends

from app.backend.base import StatusBackend
from app.db import get_backend
from app.status.page import StatusPageView, build_status_page

router = APIRouter(prefix="/api/status", tags=["Status Page"])


# ---
# Fetch services, groups, incidents and maintenance once,
# and return everything the public page renders.
# ---
@router.get("", response_model=StatusPageView)
async def get_status_page(backend: StatusBackend = Depends(get_backend)):
    return build_status_page(
        services=await backend.service.find_many(),
        groups=await backend.group.find_many(),
        incidents=await backend.incident.find_many(),
        maintenance=await backend.maintenance.find_many(),
    )
