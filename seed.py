import asyncio
import logging

from app import config
from app.backend.http import HttpStatusBackend
from app.backend.memory import demo_groups, demo_incidents, demo_maintenance, demo_services
from app.utils.time_utils import utcnow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("seed")


async def main():
    if not config.STATUS_BACKEND_URL:
        logger.error("STATUS_BACKEND_URL is not set; nothing to seed")
        return

    backend = HttpStatusBackend(config.STATUS_BACKEND_URL, timeout=config.BACKEND_TIMEOUT_SECONDS)
    await backend.connect()
    now = utcnow()

    # Idempotent: records whose id already exists are left alone
    try:
        for resource, items in (
            (backend.group, demo_groups()),
            (backend.service, demo_services(now)),
            (backend.incident, demo_incidents(now)),
            (backend.maintenance, demo_maintenance(now)),
        ):
            for item in items:
                if await resource.find_unique(item.id):
                    logger.info(f"{resource.name} {item.id} already exists")
                    continue
                await resource.create(item)
                logger.info(f"{resource.name} created: {item.id}")
    finally:
        await backend.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
