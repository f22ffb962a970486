"""Periodic removal of expired pending registrations."""

import asyncio
import logging
from datetime import datetime
from typing import Callable

from app.services.PendingRegistrationStore import PendingRegistrationStore

logger = logging.getLogger(__name__)


async def sweep_once(store: PendingRegistrationStore, clock: Callable[[], datetime] = datetime.utcnow) -> int:
    removed = await store.purge_expired(clock())
    if removed:
        logger.info(f"🧹 Removed {removed} expired pending registration(s)")
    return removed


async def pending_registration_sweeper(store: PendingRegistrationStore, interval_seconds: int):
    """Background task that purges expired pending registrations every interval."""
    logger.info(f"📅 Pending registration sweeper running every {interval_seconds}s")
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await sweep_once(store)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"❌ Pending registration sweep failed: {e}", exc_info=True)
