"""LeaderboardService: builds and serves weekly leaderboards.

build_week is one transaction: claim the week, move the latest flag, read
every account's figures once, rank, persist, close this week's snapshot rows
and open next week's from the same values. Claiming an already-built week is
a no-op, so the job can be re-run freely.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mx_common.datetime_utils import utc_now, week_bounds
from src.mx_common.errors import InvalidIdentifierError, InvalidWeekError, WeekNotEndedError
from src.mx_leaderboard.application.schemas import LeaderboardResponse
from src.mx_leaderboard.domain.models import BuildWeekResult
from src.mx_leaderboard.domain.ranking import rank_accounts
from src.mx_leaderboard.domain.repository import LeaderboardRepositoryProtocol
from src.mx_leaderboard.infrastructure.persistence import LeaderboardRepository

logger = logging.getLogger(__name__)


class LeaderboardService:
    def __init__(self, repo: LeaderboardRepositoryProtocol | None = None) -> None:
        self._repo: LeaderboardRepositoryProtocol = repo or LeaderboardRepository()

    async def build_week(
        self,
        db: AsyncSession,
        week_start: datetime,
        week_end: datetime,
        now: datetime | None = None,
    ) -> BuildWeekResult:
        """Publish a finished Monday-to-Monday week. The week guard makes a
        published week final, so partial or misaligned weeks are refused up front.
        """
        if week_start.tzinfo is None or week_end.tzinfo is None:
            raise InvalidWeekError(week_start, week_end)
        if week_end <= week_start:
            raise InvalidIdentifierError("week_end", week_end.isoformat())
        if (week_start, week_end) != week_bounds(week_start, settings.LEADERBOARD_TIMEZONE):
            raise InvalidWeekError(week_start, week_end)
        if week_end > (now or utc_now()):
            raise WeekNotEndedError(week_end)
        try:
            if not await self._repo.claim_week(db, week_start, week_end):
                await db.rollback()
                logger.info("Leaderboard for %s already built; skipping", week_start.isoformat())
                return BuildWeekResult(week_start, week_end, already_built=True)

            await self._repo.clear_latest(db)
            accounts = await self._repo.load_account_weeks(db, week_start, week_end)
            ranked = rank_accounts(accounts)
            await self._repo.insert_entries(db, week_start, week_end, ranked)
            await self._repo.close_week_snapshots(db, week_start, week_end, accounts)
            await self._repo.open_snapshots_from(
                db, week_end, week_end + (week_end - week_start), accounts
            )
            await self._repo.record_entry_count(db, week_start, week_end, len(ranked))
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Leaderboard built for %s -> %s: %d entries",
            week_start.isoformat(),
            week_end.isoformat(),
            len(ranked),
        )
        return BuildWeekResult(week_start, week_end, already_built=False, entries=len(ranked))

    async def open_week(self, db: AsyncSession, week_start: datetime, week_end: datetime) -> int:
        """Open start-of-week rows from live balances for accounts that have none yet."""
        try:
            opened = await self._repo.open_week_from_balances(db, week_start, week_end)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if opened:
            logger.info("Opened %d week snapshot rows for %s", opened, week_start.isoformat())
        return opened

    async def open_current_week(self, db: AsyncSession, now: datetime | None = None) -> int:
        start, end = week_bounds(now or utc_now(), settings.LEADERBOARD_TIMEZONE)
        return await self.open_week(db, start, end)

    async def get_latest(self, db: AsyncSession) -> LeaderboardResponse:
        entries = await self._repo.list_latest(db)
        return LeaderboardResponse.from_entries(entries)

    async def get_week(self, db: AsyncSession, week_start: datetime) -> LeaderboardResponse:
        entries = await self._repo.list_week(db, week_start)
        return LeaderboardResponse.from_entries(entries)

