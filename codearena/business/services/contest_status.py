import asyncio

from codearena.config import logger
from codearena.data.repositories.contest import sync_contest_statuses
from codearena.data.schemas import utcnow
from codearena.errors import AppException

status_logger = logger.getChild("contest_status")


async def sync_statuses_once(session_factory) -> int:
    async with session_factory() as session:
        changed = await sync_contest_statuses(session, utcnow())
    if changed:
        status_logger.info(f"Updated status of {changed} contests")
    return changed


async def run_status_sync(session_factory, interval: int) -> None:
    """Keep stored contest statuses in line with the clock until cancelled."""
    status_logger.info(f"Contest status sync started (every {interval}s)")
    while True:
        try:
            await sync_statuses_once(session_factory)
        except AppException as e:
            status_logger.error(f"Contest status sync failed: {e.detail}")
        await asyncio.sleep(interval)
