# ---
# File: app/backend/memory.py
# Purpose: In-process implementation of the data-access layer, used when no
#          REST backend is configured (local development, demos, tests).
# ---

from datetime import timedelta
from typing import Callable, Dict, Iterable, List, Optional
import logging

from app.backend.base import EventResource, StatusBackend
from app.core.errors import BackendError
from app.core.events import LEGACY_AUTHOR
from app.incidents.models import Incident, IncidentStatus
from app.maintenance.models import MaintenanceEvent, MaintenanceStatus
from app.services.models import Service, ServiceGroup, ServiceStatus
from app.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class MemoryResource(EventResource):
    def __init__(self, name: str, model: type, items: Iterable = (), on_delete: Optional[Callable] = None):
        self.name = name
        self.model = model
        self.items: Dict[str, object] = {item.id: item for item in items}
        self.on_delete = on_delete

    async def find_many(self) -> List:
        return list(self.items.values())

    async def find_unique(self, id: str):
        return self.items.get(id)

    async def create(self, item):
        if item.id in self.items:
            raise BackendError(f"{self.name} {item.id} already exists", status_code=409)
        self.items[item.id] = item
        return item

    async def update(self, id: str, data: dict):
        existing = self.items.get(id)
        if existing is None:
            return None
        updated = self.model.model_validate({**existing.model_dump(), **data})
        self.items[id] = updated
        return updated

    async def delete(self, id: str) -> bool:
        if self.items.pop(id, None) is None:
            return False
        if self.on_delete:
            self.on_delete(id)
        return True

    async def append_update(self, id: str, update):
        existing = self.items.get(id)
        if existing is None:
            return None
        updated = existing.model_copy(
            update={
                "updates": [*existing.updates, update],
                "status": update.status,
                "updatedAt": update.createdAt,
            }
        )
        self.items[id] = updated
        return updated


class MemoryStatusBackend(StatusBackend):
    def __init__(self, services=(), groups=(), incidents=(), maintenance=()):
        self.service = MemoryResource("services", Service, services, on_delete=self._unlink_service)
        self.group = MemoryResource("service-groups", ServiceGroup, groups, on_delete=self._ungroup_services)
        self.incident = MemoryResource("incidents", Incident, incidents)
        self.maintenance = MemoryResource("maintenance", MaintenanceEvent, maintenance)

    @classmethod
    def with_demo_data(cls) -> "MemoryStatusBackend":
        now = utcnow()
        return cls(
            services=demo_services(now),
            groups=demo_groups(),
            incidents=demo_incidents(now),
            maintenance=demo_maintenance(now),
        )

    async def connect(self) -> None:
        logger.info(
            f"[BACKEND] Using in-memory backend ({len(self.service.items)} services, "
            f"{len(self.incident.items)} incidents, {len(self.maintenance.items)} maintenance events)"
        )

    async def ping(self) -> bool:
        return True

    # A deleted service is also dropped from every group's member list
    def _unlink_service(self, service_id: str) -> None:
        for group in list(self.group.items.values()):
            if service_id in group.serviceIds:
                self.group.items[group.id] = group.model_copy(
                    update={"serviceIds": [s for s in group.serviceIds if s != service_id]}
                )

    # Services pointing at a deleted group become ungrouped
    def _ungroup_services(self, group_id: str) -> None:
        now = utcnow()
        for service in list(self.service.items.values()):
            if service.groupId == group_id:
                self.service.items[service.id] = service.model_copy(update={"groupId": None, "lastUpdated": now})


# ---
# Demo data set: a small product with three groups, one open incident and
# one upcoming maintenance window. Also used by seed.py.
# ---
def demo_services(now) -> List[Service]:
    rows = [
        ("srv_1", "API", "Core API services", ServiceStatus.OPERATIONAL, 99.98, "grp_1"),
        ("srv_2", "Website", "Customer-facing website", ServiceStatus.OPERATIONAL, 99.95, "grp_1"),
        ("srv_3", "Database", "Primary database cluster", ServiceStatus.OPERATIONAL, 99.99, "grp_2"),
        ("srv_4", "Authentication", "User authentication services", ServiceStatus.OPERATIONAL, 99.9, "grp_2"),
        ("srv_5", "Payment Processing", "Payment processing services", ServiceStatus.DEGRADED_PERFORMANCE, 98.5, "grp_3"),
    ]
    return [
        Service(id=id, name=name, description=description, status=status, uptime=uptime, groupId=group, lastUpdated=now)
        for id, name, description, status, uptime, group in rows
    ]


def demo_groups() -> List[ServiceGroup]:
    return [
        ServiceGroup(id="grp_1", name="Frontend Services", serviceIds=["srv_1", "srv_2"]),
        ServiceGroup(id="grp_2", name="Backend Services", serviceIds=["srv_3", "srv_4"]),
        ServiceGroup(id="grp_3", name="Billing Services", serviceIds=["srv_5"]),
    ]


def demo_incidents(now) -> List[Incident]:
    opened = now - timedelta(hours=1)
    identified = now - timedelta(minutes=30)
    return [
        Incident(
            id="inc_1",
            title="API Latency Issues",
            description="We are investigating reports of increased latency on API calls.",
            status=IncidentStatus.IDENTIFIED,
            severity="minor",
            affectedServiceIds=["srv_1"],
            createdAt=opened,
            updatedAt=identified,
            updates=[
                {
                    "id": "upd_1",
                    "message": "We are investigating reports of increased latency on API calls.",
                    "status": "investigating",
                    "createdAt": opened,
                    "author": LEGACY_AUTHOR,
                },
                {
                    "id": "upd_2",
                    "message": "We have identified the issue and are working on a fix.",
                    "status": "identified",
                    "createdAt": identified,
                    "author": LEGACY_AUTHOR,
                },
            ],
        )
    ]


def demo_maintenance(now) -> List[MaintenanceEvent]:
    created = now - timedelta(days=2)
    return [
        MaintenanceEvent(
            id="mnt_1",
            title="Database Upgrade",
            description="Scheduled maintenance for database version upgrade.",
            status=MaintenanceStatus.SCHEDULED,
            affectedServiceIds=["srv_3"],
            scheduledStart=now + timedelta(days=1),
            scheduledEnd=now + timedelta(days=1, hours=2),
            createdAt=created,
            updatedAt=created,
            updates=[
                {
                    "id": "upd_3",
                    "message": "Scheduled maintenance for database version upgrade.",
                    "status": "scheduled",
                    "createdAt": created,
                    "author": LEGACY_AUTHOR,
                }
            ],
        )
    ]
