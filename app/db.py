# ---
# File: app/db.py
# Purpose: Builds the data-access backend from configuration and exposes it
#          as a FastAPI dependency
# ---

from app import config
from app.backend.base import StatusBackend
from app.backend.http import HttpStatusBackend
from app.backend.memory import MemoryStatusBackend


def create_backend() -> StatusBackend:
    if config.STATUS_BACKEND_URL:
        return HttpStatusBackend(config.STATUS_BACKEND_URL, timeout=config.BACKEND_TIMEOUT_SECONDS)
    return MemoryStatusBackend.with_demo_data()


# Process-wide backend instance, connected on startup
db = create_backend()


def get_backend() -> StatusBackend:
    return db
