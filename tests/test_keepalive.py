"""
Tests for the keep-alive ping loop and its start/stop lifecycle.
"""

import asyncio

import httpx
import pytest

from app import config
from app.health import keepalive

TARGET = "http://status.test/health"


@pytest.fixture(autouse=True)
def fresh_counters(monkeypatch):
    monkeypatch.setattr(keepalive, "ping_count", 0)
    monkeypatch.setattr(keepalive, "failure_count", 0)
    monkeypatch.setattr(keepalive, "_task", None)
    monkeypatch.setattr(keepalive, "_stop_event", None)


@pytest.mark.asyncio
async def test_loop_counts_pings_and_stops_on_event():
    stop_event = asyncio.Event()
    calls = []

    def handler(request):
        calls.append(str(request.url))
        if len(calls) == 1:
            return httpx.Response(200, json={"status": "ok"})
        stop_event.set()
        raise httpx.ConnectError("connection refused", request=request)

    await asyncio.wait_for(
        keepalive.keepalive_loop(TARGET, 0, 1, stop_event, transport=httpx.MockTransport(handler)),
        timeout=5,
    )

    assert calls == [TARGET, TARGET]
    assert keepalive.ping_count == 1
    assert keepalive.failure_count == 1
    stats = keepalive.statistics()
    assert stats["total_pings"] == 1
    assert stats["failed_pings"] == 1
    assert stats["success_rate_percent"] == 50.0


@pytest.mark.asyncio
async def test_loop_does_not_ping_once_stopped():
    stop_event = asyncio.Event()
    stop_event.set()
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200)

    await asyncio.wait_for(
        keepalive.keepalive_loop(TARGET, 60, 1, stop_event, transport=httpx.MockTransport(handler)),
        timeout=5,
    )

    assert calls == []
    assert keepalive.statistics()["success_rate_percent"] == 0.0


@pytest.mark.asyncio
async def test_start_and_stop(monkeypatch):
    seen = {}

    async def fake_loop(url, interval_seconds, timeout_seconds, stop_event):
        seen["url"] = url
        await stop_event.wait()
        seen["stopped"] = True

    monkeypatch.setattr(config, "KEEPALIVE_URL", TARGET)
    monkeypatch.setattr(keepalive, "keepalive_loop", fake_loop)

    assert keepalive.start() is True
    await asyncio.sleep(0)
    await keepalive.stop()

    assert seen == {"url": TARGET, "stopped": True}
    assert keepalive._task is None


def test_start_disabled_without_url(monkeypatch):
    monkeypatch.setattr(config, "KEEPALIVE_URL", "")
    assert keepalive.start() is False
