"""
Expiry sweeper for lapsed holds.

sweep_expired_holds() runs inside the caller's transaction (first step of
reserve, and before availability reads). HoldSweeper runs the same delete on
a fixed interval so capacity is reclaimed even when no requests arrive.
"""

import logging
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from slotkeeper.models.hold import Hold

logger = logging.getLogger(__name__)


async def sweep_expired_holds(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Delete every hold with expires_at < now. Does not commit."""
    now = now or datetime.utcnow()
    result = await db.execute(
        delete(Hold)
        .where(Hold.expires_at < now)
        .execution_options(synchronize_session=False)
    )
    removed = result.rowcount or 0
    if removed:
        logger.info("Swept %d expired hold(s)", removed)
    return removed


class HoldSweeper:
    """
    Periodic background sweep of expired holds.
    Each tick uses its own session and transaction.
    """

    JOB_ID = "sweep_expired_holds"

    def __init__(self, session_factory: async_sessionmaker, interval_seconds: int = 60):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.scheduler = AsyncIOScheduler()
        self.is_running = False

        logger.info("Initialized HoldSweeper with %ds interval", interval_seconds)

    async def run_once(self) -> int:
        """One sweep pass. Failures are logged and rolled back; the next tick retries."""
        async with self.session_factory() as db:
            try:
                removed = await sweep_expired_holds(db)
                await db.commit()
                return removed
            except Exception:
                await db.rollback()
                logger.exception("Background hold sweep failed")
                return 0

    def start(self):
        if self.is_running:
            logger.warning("HoldSweeper is already running")
            return

        self.scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=self.JOB_ID,
            name="Sweep expired slot holds",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        self.is_running = True
        logger.info("HoldSweeper started")

    def stop(self):
        if not self.is_running:
            return
        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("HoldSweeper stopped")
