# ---
# File: app/health/routes.py
# Purpose: Health endpoints for service readiness, backend checks, and keep-alive monitoring
# ---

from fastapi import APIRouter, Depends
import time

from app import config
from app.backend.base import StatusBackend
from app.core.errors import BackendError
from app.db import get_backend
from app.health import keepalive

# Track when the server started (for uptime calculation)
START_TIME = time.time()

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


async def check_backend(backend: StatusBackend) -> dict:
    """
    Backend Health Check

    Verifies the data-access backend answers a trivial read.
    Returns status "ok" if it does, "error" with the reason otherwise.
    """
    detail = {"status": "ok", "type": type(backend).__name__}
    try:
        await backend.ping()
    except BackendError as exc:
        detail["status"] = "error"
        detail["error"] = exc.message
    return detail


@router.get("")
async def health(backend: StatusBackend = Depends(get_backend)):
    """
    Primary Health Endpoint

    Returns:
        - service: Application name
        - status: "ok" if the backend check passes, "degraded" otherwise
        - uptime_seconds: How long the server has been running
        - checks: Individual status for each dependency

    Always answers 200 while the process is up; a failing backend shows as "degraded".
    """
    backend_status = await check_backend(backend)
    overall = "ok" if backend_status["status"] == "ok" else "degraded"

    return {
        "service": "uptime-status-page",
        "status": overall,
        "uptime_seconds": int(time.time() - START_TIME),
        "checks": {
            "backend": backend_status,
        },
    }


@router.get("/keepalive")
async def keepalive_status():
    """
    Keep-Alive Statistics Endpoint

    Example Response (Enabled):
        {
            "enabled": true,
            "target_url": "https://status.example.com/health",
            "interval_seconds": 300,
            "timeout_seconds": 10,
            "statistics": {
                "total_pings": 42,
                "successful_pings": 40,
                "failed_pings": 2,
                "success_rate_percent": 95.24
            },
            "uptime_seconds": 12600
        }
    """
    if not config.KEEPALIVE_URL:
        return {
            "enabled": False,
            "reason": "KEEPALIVE_URL environment variable not set",
            "uptime_seconds": int(time.time() - START_TIME),
        }

    return {
        "enabled": True,
        "target_url": config.KEEPALIVE_URL,
        "interval_seconds": config.KEEPALIVE_INTERVAL_SECONDS,
        "timeout_seconds": config.KEEPALIVE_TIMEOUT_SECONDS,
        "statistics": keepalive.statistics(),
        "uptime_seconds": int(time.time() - START_TIME),
    }
