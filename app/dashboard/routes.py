# ---
# File: app/dashboard/routes.py
# Purpose: Operator dashboard overview endpoint
# ---

from fastapi import APIRouter, Depends

from app.backend.base import StatusBackend
from app.dashboard.summary import DashboardSummary, build_summary
from app.db import get_backend

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(backend: StatusBackend = Depends(get_backend)):
    return build_summary(
        services=await backend.service.find_many(),
        incidents=await backend.incident.find_many(),
        maintenance=await backend.maintenance.find_many(),
    )
