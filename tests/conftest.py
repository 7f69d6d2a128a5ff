"""
Shared fixtures: a fresh in-memory backend per test, and a TestClient
wired to it through FastAPI dependency overrides.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.backend.memory import MemoryStatusBackend
from app.db import get_backend
from app.main import app
from app.services.models import Service, ServiceGroup

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_service(id, status="operational", group=None, uptime=None):
    return Service(id=id, name=id.upper(), status=status, groupId=group, uptime=uptime)


@pytest.fixture
def backend():
    return MemoryStatusBackend.with_demo_data()


@pytest.fixture
def client(backend):
    app.dependency_overrides[get_backend] = lambda: backend
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def services():
    return [
        make_service("svc_1", group="grp_a"),
        make_service("svc_2", group="grp_b"),
        make_service("svc_3"),
    ]


@pytest.fixture
def groups():
    return [
        ServiceGroup(id="grp_a", name="Frontend"),
        ServiceGroup(id="grp_b", name="Backend"),
    ]
