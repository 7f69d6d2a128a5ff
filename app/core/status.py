# ---
# File: app/core/status.py
# Purpose: Roll per-service statuses up into one headline status and
#          partition services into their groups for display.
# ---

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from app.services.models import Service, ServiceGroup, ServiceStatus

# Most severe first
SEVERITY_ORDER = list(ServiceStatus)

STATUS_MESSAGES = {
    ServiceStatus.OPERATIONAL: "All systems operational",
    ServiceStatus.DEGRADED_PERFORMANCE: "Some systems experiencing degraded performance",
    ServiceStatus.PARTIAL_OUTAGE: "Some systems experiencing a partial outage",
    ServiceStatus.MAJOR_OUTAGE: "Major system outage in progress",
    ServiceStatus.MAINTENANCE: "Scheduled maintenance in progress",
}

STATUS_LABELS = {
    ServiceStatus.OPERATIONAL: "Operational",
    ServiceStatus.DEGRADED_PERFORMANCE: "Degraded",
    ServiceStatus.PARTIAL_OUTAGE: "Partial Outage",
    ServiceStatus.MAJOR_OUTAGE: "Major Outage",
    ServiceStatus.MAINTENANCE: "Maintenance",
}


@dataclass
class GroupBucket:
    group: ServiceGroup
    services: List[Service] = field(default_factory=list)


@dataclass
class GroupedView:
    groups: List[GroupBucket] = field(default_factory=list)
    ungrouped: List[Service] = field(default_factory=list)


# ---
# Reduce a collection of services to one overall status.
#
# Any outage or degradation wins in severity order. Maintenance is only
# reported when every service is in maintenance; a single service under
# planned work does not turn the whole page into a maintenance banner.
# ---
def aggregate_status(services: Iterable[Service]) -> ServiceStatus:
    statuses = {ServiceStatus(s.status) for s in services}
    if not statuses:
        return ServiceStatus.OPERATIONAL

    for status in (
        ServiceStatus.MAJOR_OUTAGE,
        ServiceStatus.PARTIAL_OUTAGE,
        ServiceStatus.DEGRADED_PERFORMANCE,
    ):
        if status in statuses:
            return status

    if statuses == {ServiceStatus.MAINTENANCE}:
        return ServiceStatus.MAINTENANCE
    return ServiceStatus.OPERATIONAL


def group_services(services: Sequence[Service], groups: Sequence[ServiceGroup]) -> GroupedView:
    """
    Partition services by group, keeping group order and service order.

    Membership is read from either side: a service's own `groupId`, or a
    group's `serviceIds` list. A service with a `groupId` goes to that group,
    or to `ungrouped` when no such group exists, even if another group lists
    it. A service without a `groupId` goes to the first group listing it, else
    to `ungrouped`. Every input service appears in exactly one bucket.
    """
    buckets: Dict[str, GroupBucket] = {}
    for group in groups:
        buckets.setdefault(group.id, GroupBucket(group=group))

    listed_in: Dict[str, str] = {}
    for group in groups:
        for service_id in group.serviceIds:
            listed_in.setdefault(service_id, group.id)

    view = GroupedView(groups=list(buckets.values()))
    for service in services:
        group_id = service.groupId if service.groupId is not None else listed_in.get(service.id)
        if group_id not in buckets:
            view.ungrouped.append(service)
        else:
            buckets[group_id].services.append(service)
    return view


def status_message(status: ServiceStatus) -> str:
    return STATUS_MESSAGES.get(status, "System status unknown")


def status_label(status: ServiceStatus) -> str:
    return STATUS_LABELS.get(status, "Unknown")


# Per-status service counts in severity order, zero counts omitted
def status_distribution(services: Iterable[Service]) -> List[dict]:
    counts = {status: 0 for status in SEVERITY_ORDER}
    for service in services:
        counts[ServiceStatus(service.status)] += 1
    return [
        {"status": status.value, "label": status_label(status), "count": count}
        for status, count in counts.items()
        if count > 0
    ]
