# ---
# File: app/status/page.py
# Purpose: Assemble the public status page: headline status, services by
#          group, open incidents, maintenance windows, and recent history.
# ---

from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel

from app.core.status import aggregate_status, group_services, status_message
from app.core.timeline import current_status, is_active, is_in_progress, is_upcoming
from app.incidents.models import Incident
from app.maintenance.models import MaintenanceEvent, MaintenanceStatus
from app.services.models import Service, ServiceGroup, ServiceStatus
from app.utils.time_utils import utcnow


class GroupStatusView(BaseModel):
    id: str
    name: str
    status: ServiceStatus
    services: List[Service]


class StatusPageView(BaseModel):
    overallStatus: ServiceStatus
    message: str
    groups: List[GroupStatusView]
    ungroupedServices: List[Service]
    activeIncidents: List[Incident]
    resolvedIncidents: List[Incident]
    inProgressMaintenance: List[MaintenanceEvent]
    upcomingMaintenance: List[MaintenanceEvent]
    completedMaintenance: List[MaintenanceEvent]
    generatedAt: datetime


def build_status_page(
    services: Sequence[Service],
    groups: Sequence[ServiceGroup],
    incidents: Sequence[Incident],
    maintenance: Sequence[MaintenanceEvent],
    now: Optional[datetime] = None,
) -> StatusPageView:
    now = now or utcnow()
    overall = aggregate_status(services)
    grouped = group_services(services, groups)

    # Empty groups are not shown to end users
    group_views = [
        GroupStatusView(
            id=bucket.group.id,
            name=bucket.group.name,
            status=aggregate_status(bucket.services),
            services=bucket.services,
        )
        for bucket in grouped.groups
        if bucket.services
    ]

    resolved = sorted((i for i in incidents if not is_active(i)), key=lambda i: i.updatedAt, reverse=True)
    upcoming = sorted((m for m in maintenance if is_upcoming(m, now)), key=lambda m: m.scheduledStart)
    completed = sorted(
        (m for m in maintenance if current_status(m) == MaintenanceStatus.COMPLETED),
        key=lambda m: m.scheduledStart,
        reverse=True,
    )

    return StatusPageView(
        overallStatus=overall,
        message=status_message(overall),
        groups=group_views,
        ungroupedServices=grouped.ungrouped,
        activeIncidents=[i for i in incidents if is_active(i)],
        resolvedIncidents=resolved,
        inProgressMaintenance=[m for m in maintenance if is_in_progress(m)],
        upcomingMaintenance=upcoming,
        completedMaintenance=completed,
        generatedAt=now,
    )
