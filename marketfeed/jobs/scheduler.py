"""APScheduler configuration and lifecycle management."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from marketfeed.config import DIRECTORY_REFRESH_MINUTES
from marketfeed.services.symbol_directory import SymbolDirectory

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def refresh_directory(directory: SymbolDirectory) -> None:
    """Job body: keep the directory warm so type-ahead rarely hits a cold cache."""
    listings = await directory.refresh()
    logger.debug("Directory warm-up: %d listings", len(listings))


def create_scheduler(
    directory: SymbolDirectory,
    minutes: int = DIRECTORY_REFRESH_MINUTES,
) -> AsyncIOScheduler:
    """Create and configure the scheduler.

    The directory is passed as a job kwarg so the job function stays
    testable without global state.  The first run fires one interval after
    start; until then the directory still fills lazily on first read.
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        refresh_directory,
        trigger="interval",
        minutes=minutes,
        id="symbol_directory_refresh",
        name="Refresh the cached symbol directory",
        kwargs={"directory": directory},
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    return scheduler


def start_scheduler(directory: SymbolDirectory) -> AsyncIOScheduler:
    """Create, start, and return the scheduler."""
    global _scheduler
    _scheduler = create_scheduler(directory)
    _scheduler.start()
    logger.info("Scheduler started with %d jobs", len(_scheduler.get_jobs()))
    return _scheduler


def stop_scheduler() -> None:
    """Gracefully shut down the scheduler."""
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
        _scheduler = None
