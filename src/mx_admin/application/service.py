# src/mx_admin/application/service.py
"""Operator trigger surface: the same jobs the scheduler runs, on demand."""
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mx_account.application.schemas import WalletCreditResponse
from src.mx_account.application.service import AccountApplicationService
from src.mx_clearing.application.schemas import SettlementResponse, SnapshotResponse
from src.mx_clearing.application.service import ClearingService
from src.mx_common.datetime_utils import previous_week_bounds, utc_now
from src.mx_fixture.application.schemas import TrackerSummaryResponse
from src.mx_fixture.application.tracker import FixtureTracker
from src.mx_leaderboard.application.schemas import BuildWeekResponse
from src.mx_leaderboard.application.service import LeaderboardService


class AdminService:
    def __init__(
        self,
        tracker: FixtureTracker | None = None,
        clearing: ClearingService | None = None,
        leaderboard: LeaderboardService | None = None,
        accounts: AccountApplicationService | None = None,
    ) -> None:
        self._clearing = clearing or ClearingService()
        self._tracker = tracker or FixtureTracker(clearing=self._clearing)
        self._leaderboard = leaderboard or LeaderboardService()
        self._accounts = accounts or AccountApplicationService()

    async def run_tracker(self, db: AsyncSession) -> TrackerSummaryResponse:
        summary = await self._tracker.run_cycle(db)
        return TrackerSummaryResponse.from_summary(summary)

    async def build_leaderboard(
        self,
        db: AsyncSession,
        week_start: datetime | None = None,
        week_end: datetime | None = None,
    ) -> BuildWeekResponse:
        if week_start is None or week_end is None:
            week_start, week_end = previous_week_bounds(utc_now(), settings.LEADERBOARD_TIMEZONE)
        result = await self._leaderboard.build_week(db, week_start, week_end)
        return BuildWeekResponse.from_result(result)

    async def snapshot_fixture(
        self,
        db: AsyncSession,
        fixture_id: str,
        home_cap: int | None = None,
        away_cap: int | None = None,
        backfill: bool = False,
    ) -> SnapshotResponse:
        if backfill or home_cap is not None or away_cap is not None:
            outcome = await self._clearing.backfill_snapshot(db, fixture_id, home_cap, away_cap)
        else:
            outcome = await self._clearing.capture_snapshot(db, fixture_id)
        return SnapshotResponse.from_outcome(outcome)

    async def settle_fixture(self, db: AsyncSession, fixture_id: str) -> SettlementResponse:
        outcome = await self._clearing.settle(db, fixture_id)
        return SettlementResponse.from_outcome(outcome)

    async def credit_wallet(
        self, db: AsyncSession, user_id: str, amount_cents: int, idempotency_ref: str
    ) -> WalletCreditResponse:
        return await self._accounts.credit_wallet(db, user_id, amount_cents, idempotency_ref)

    async def aclose(self) -> None:
        await self._tracker.aclose()
