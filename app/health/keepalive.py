# ---
# File: app/health/keepalive.py
# Purpose: Optional self-ping loop that keeps free-tier hosts from idling the
#          service, plus the counters reported by /api/v1/health/keepalive
# ---

from typing import Optional
import asyncio
import logging

import httpx

from app import config

logger = logging.getLogger(__name__)

# Internal state for the keep-alive background task
_stop_event: Optional[asyncio.Event] = None
_task: Optional[asyncio.Task] = None
ping_count = 0
failure_count = 0


async def keepalive_loop(
    url: str,
    interval_seconds: int,
    timeout_seconds: int,
    stop_event: asyncio.Event,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """
    Ping `url` every `interval_seconds` until `stop_event` is set.

    Failed pings are counted and logged; they never stop the loop.
    `transport` routes the pings somewhere other than the network.
    """
    global ping_count, failure_count

    logger.info(
        "[KEEPALIVE] Service started | Target: %s | Interval: %ds | Timeout: %ds",
        url,
        interval_seconds,
        timeout_seconds,
    )

    async with httpx.AsyncClient(timeout=timeout_seconds, transport=transport) as client:
        while not stop_event.is_set():
            try:
                response = await client.get(url)
                ping_count += 1
                if response.status_code == 200:
                    logger.info(
                        "[KEEPALIVE] Ping successful | Status: %s | Total pings: %d | Failures: %d",
                        response.status_code,
                        ping_count,
                        failure_count,
                    )
                else:
                    logger.warning(
                        "[KEEPALIVE] Unexpected status | Status: %s | Total pings: %d",
                        response.status_code,
                        ping_count,
                    )
            except httpx.HTTPError as exc:
                failure_count += 1
                logger.warning(
                    "[KEEPALIVE] Ping failed | Error: %s | Total failures: %d/%d",
                    str(exc)[:100],
                    failure_count,
                    ping_count + failure_count,
                )

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
                break
            except asyncio.TimeoutError:
                continue

    logger.info("[KEEPALIVE] Service stopped | Total pings: %d | Failures: %d", ping_count, failure_count)


def start() -> bool:
    global _stop_event, _task
    if not config.KEEPALIVE_URL:
        logger.info("[STARTUP] Keep-alive is DISABLED (KEEPALIVE_URL not set)")
        return False
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(
        keepalive_loop(
            config.KEEPALIVE_URL,
            config.KEEPALIVE_INTERVAL_SECONDS,
            config.KEEPALIVE_TIMEOUT_SECONDS,
            _stop_event,
        )
    )
    logger.info("[STARTUP] Keep-alive task created")
    return True


# ---
# Signal the loop to stop and give it 5 seconds before cancelling it.
# ---
async def stop() -> None:
    global _task
    if not _task:
        return
    logger.info("[SHUTDOWN] Stopping keep-alive service...")
    _stop_event.set()
    try:
        await asyncio.wait_for(_task, timeout=5)
        logger.info("[SHUTDOWN] Keep-alive stopped gracefully")
    except asyncio.TimeoutError:
        logger.warning("[SHUTDOWN] Keep-alive timeout - forcing cancellation")
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            logger.info("[SHUTDOWN] Keep-alive cancelled")
    _task = None


def statistics() -> dict:
    attempts = ping_count + failure_count
    success_rate = (ping_count / attempts) * 100 if attempts else 0.0
    return {
        "total_pings": ping_count,
        "successful_pings": ping_count,
        "failed_pings": failure_count,
        "success_rate_percent": round(success_rate, 2),
    }
