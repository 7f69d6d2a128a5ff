"""
Tests for the in-memory backend: delete cascades and update semantics.
"""

import pytest

from app.core.errors import BackendError
from app.incidents.models import IncidentStatus, IncidentUpdate


@pytest.mark.asyncio
async def test_deleting_service_unlinks_it_from_groups(backend):
    assert await backend.service.delete("srv_1") is True

    group = await backend.group.find_unique("grp_1")
    assert group.serviceIds == ["srv_2"]
    assert await backend.service.find_unique("srv_1") is None


@pytest.mark.asyncio
async def test_deleting_group_ungroups_its_services(backend):
    assert await backend.group.delete("grp_2") is True

    for service_id in ("srv_3", "srv_4"):
        service = await backend.service.find_unique(service_id)
        assert service is not None
        assert service.groupId is None


@pytest.mark.asyncio
async def test_delete_missing_returns_false(backend):
    assert await backend.incident.delete("inc_404") is False


@pytest.mark.asyncio
async def test_create_duplicate_id_conflicts(backend):
    existing = await backend.service.find_unique("srv_1")
    with pytest.raises(BackendError) as exc_info:
        await backend.service.create(existing)
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_update_revalidates_legacy_values(backend):
    updated = await backend.service.update("srv_2", {"status": "degraded"})
    assert updated.status == "degraded_performance"


@pytest.mark.asyncio
async def test_append_update_moves_status(backend):
    update = IncidentUpdate(message="fixed", status="resolved", author="op")
    stored = await backend.incident.append_update("inc_1", update)

    assert stored.status == IncidentStatus.RESOLVED
    assert stored.updates[-1].id == update.id
    assert stored.updatedAt == update.createdAt
    assert (await backend.incident.find_unique("inc_1")).status == IncidentStatus.RESOLVED


@pytest.mark.asyncio
async def test_append_update_missing_event(backend):
    update = IncidentUpdate(message="fixed", status="resolved", author="op")
    assert await backend.incident.append_update("inc_404", update) is None
