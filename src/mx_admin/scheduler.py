"""Background jobs on an in-process APScheduler.

- fixture tracker every TRACKER_INTERVAL_MINUTES
- weekly leaderboard Monday 00:05 in LEADERBOARD_TIMEZONE, for the week just ended

Each run opens its own session. All coordination lives in PostgreSQL, so a
job that overlaps an operator-triggered run of the same work is harmless.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from config.settings import settings
from src.mx_common.database import async_session_factory
from src.mx_common.datetime_utils import previous_week_bounds, utc_now
from src.mx_fixture.application.tracker import FixtureTracker
from src.mx_leaderboard.application.service import LeaderboardService

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()
_scheduler_started = False

_tracker = FixtureTracker()
_leaderboard = LeaderboardService()


async def run_tracker_job() -> None:
    try:
        async with async_session_factory() as db:
            await _tracker.run_cycle(db)
    except Exception:
        logger.exception("Tracker job failed")


async def build_leaderboard_job() -> None:
    week_start, week_end = previous_week_bounds(utc_now(), settings.LEADERBOARD_TIMEZONE)
    try:
        async with async_session_factory() as db:
            await _leaderboard.build_week(db, week_start, week_end)
    except Exception:
        logger.exception("Leaderboard job failed for week %s", week_start.isoformat())


async def open_current_week() -> None:
    """Bootstrap start-of-week rows for accounts that have none (first deploy, new accounts)."""
    try:
        async with async_session_factory() as db:
            await _leaderboard.open_current_week(db)
    except Exception:
        logger.exception("Opening current leaderboard week failed")


async def close_jobs() -> None:
    await _tracker.aclose()


def start_scheduler() -> None:
    global _scheduler_started  # noqa: PLW0603
    if _scheduler_started:
        logger.warning("Scheduler already started, skipping duplicate initialization")
        return

    scheduler.add_job(
        run_tracker_job,
        trigger=IntervalTrigger(minutes=settings.TRACKER_INTERVAL_MINUTES),
        id="fixture_tracker",
        name="Fixture lifecycle tracker",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        build_leaderboard_job,
        trigger=CronTrigger(
            day_of_week="mon", hour=0, minute=5, timezone=settings.LEADERBOARD_TIMEZONE
        ),
        id="weekly_leaderboard",
        name="Weekly leaderboard build",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=6 * 3600,
    )
    scheduler.start()
    _scheduler_started = True
    logger.info(
        "Scheduler started: tracker every %d min, leaderboard Mondays 00:05 %s",
        settings.TRACKER_INTERVAL_MINUTES,
        settings.LEADERBOARD_TIMEZONE,
    )


def stop_scheduler() -> None:
    global _scheduler_started  # noqa: PLW0603
    if scheduler.running:
        scheduler.shutdown(wait=False)
        _scheduler_started = False
        logger.info("Scheduler stopped")
