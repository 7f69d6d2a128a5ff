# ---
# File: app/dashboard/summary.py
# Purpose: Operator dashboard overview computed from the current data set
# ---

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from pydantic import BaseModel

from app.core.status import aggregate_status, status_distribution, status_message
from app.core.timeline import is_active, is_upcoming
from app.incidents.models import Incident
from app.maintenance.models import MaintenanceEvent
from app.services.models import Service, ServiceStatus
from app.utils.time_utils import utcnow

# Uptime assumed for services that do not report one
DEFAULT_UPTIME = 99.9
HISTORY_DAYS = 7


class StatusCount(BaseModel):
    status: ServiceStatus
    label: str
    count: int


class IncidentHistoryPoint(BaseModel):
    date: str
    incidents: int


class DashboardSummary(BaseModel):
    overallStatus: ServiceStatus
    message: str
    totalServices: int
    activeIncidents: int
    scheduledMaintenance: int
    overallUptime: float
    statusDistribution: List[StatusCount]
    incidentHistory: List[IncidentHistoryPoint]


def overall_uptime(services: Sequence[Service]) -> float:
    if not services:
        return 100.0
    total = sum(s.uptime if s.uptime is not None else DEFAULT_UPTIME for s in services)
    return round(total / len(services), 2)


# ---
# Incidents opened per calendar day (UTC) over the last `days` days,
# oldest first, labelled like "Oct 13".
# ---
def incident_history(incidents: Sequence[Incident], now: Optional[datetime] = None, days: int = HISTORY_DAYS) -> List[IncidentHistoryPoint]:
    now = now or utcnow()
    points = []
    for offset in range(days - 1, -1, -1):
        day = (now - timedelta(days=offset)).date()
        count = sum(1 for i in incidents if i.createdAt.date() == day)
        points.append(IncidentHistoryPoint(date=day.strftime("%b %d"), incidents=count))
    return points


def build_summary(
    services: Sequence[Service],
    incidents: Sequence[Incident],
    maintenance: Sequence[MaintenanceEvent],
    now: Optional[datetime] = None,
) -> DashboardSummary:
    now = now or utcnow()
    overall = aggregate_status(services)
    return DashboardSummary(
        overallStatus=overall,
        message=status_message(overall),
        totalServices=len(services),
        activeIncidents=sum(1 for i in incidents if is_active(i)),
        scheduledMaintenance=sum(1 for m in maintenance if is_upcoming(m, now)),
        overallUptime=overall_uptime(services),
        statusDistribution=[StatusCount(**row) for row in status_distribution(services)],
        incidentHistory=incident_history(incidents, now),
    )
