"""Leaderboard week chaining against real SQL.

Uses a far-future week so nothing already in the database can collide with
the week guard; accounts created now exist "by week_end" of that week.
"""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mx_account.application.service import AccountApplicationService
from src.mx_common.datetime_utils import week_bounds
from src.mx_leaderboard.application.service import LeaderboardService
from src.mx_leaderboard.infrastructure.persistence import LeaderboardRepository

WEEK_START, WEEK_END = week_bounds(datetime(2099, 6, 10, 12, 0, tzinfo=UTC), "Asia/Dubai")
NEXT_END = WEEK_END + (WEEK_END - WEEK_START)
AFTER_WEEK = WEEK_END + timedelta(minutes=5)
AFTER_NEXT = NEXT_END + timedelta(minutes=5)


@pytest.fixture(autouse=True)
def _dubai_weeks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "LEADERBOARD_TIMEZONE", "Asia/Dubai")


def _user() -> str:
    return f"it-{uuid.uuid4().hex[:12]}"


async def _credit(db: AsyncSession, user_id: str, amount: int) -> None:
    accounts = AccountApplicationService(publisher=AsyncMock())
    resp = await accounts.credit_wallet(db, user_id, amount, f"it-{uuid.uuid4().hex}")
    assert resp.credited is True


async def _team(db: AsyncSession, market_cap: int, total_shares: int) -> int:
    team_id = 900_000_000 + uuid.uuid4().int % 99_999_999
    await db.execute(
        text("""
            INSERT INTO teams (id, name, market_cap, total_shares, available_shares)
            VALUES (:id, :name, :cap, :shares, :shares)
        """),
        {"id": team_id, "name": f"IT {team_id}", "cap": market_cap, "shares": total_shares},
    )
    return team_id


async def _snapshot(db: AsyncSession, user_id: str, week_start: datetime) -> Any:
    result = await db.execute(
        text("""
            SELECT * FROM account_week_snapshots
            WHERE user_id = :user_id AND week_start = :week_start
        """),
        {"user_id": user_id, "week_start": week_start},
    )
    return result.fetchone()


async def _entry(db: AsyncSession, user_id: str, week_start: datetime) -> Any:
    result = await db.execute(
        text("""
            SELECT * FROM weekly_leaderboard
            WHERE user_id = :user_id AND week_start = :week_start
        """),
        {"user_id": user_id, "week_start": week_start},
    )
    return result.fetchone()


class TestWeekChaining:
    async def test_next_week_starts_from_this_weeks_end(self, db: AsyncSession) -> None:
        user = _user()
        await _credit(db, user, 100_000)
        team_id = await _team(db, market_cap=1_000_000, total_shares=1_000)
        await db.execute(
            text("""
                INSERT INTO positions (user_id, team_id, quantity, total_invested)
                VALUES (:user_id, :team_id, 10, 10000)
            """),
            {"user_id": user, "team_id": team_id},
        )
        service = LeaderboardService()
        await service.open_week(db, WEEK_START, WEEK_END)
        await db.execute(
            text("UPDATE teams SET market_cap = 1100000 WHERE id = :id"), {"id": team_id}
        )

        await service.build_week(db, WEEK_START, WEEK_END, now=AFTER_WEEK)

        closed = await _snapshot(db, user, WEEK_START)
        opened = await _snapshot(db, user, WEEK_END)
        assert closed.closed_at is not None
        assert (closed.start_wallet_value, closed.start_portfolio_value) == (100_000, 10_000)
        assert (closed.end_wallet_value, closed.end_portfolio_value) == (100_000, 11_000)
        assert opened.start_wallet_value == closed.end_wallet_value
        assert opened.start_portfolio_value == closed.end_portfolio_value
        assert opened.start_account_value == closed.end_account_value
        assert opened.start_deposit_total == closed.end_deposit_total == 100_000
        assert opened.closed_at is None

        entry = await _entry(db, user, WEEK_START)
        assert entry.deposits_during_week == 0
        assert entry.weekly_return == Decimal(1_000) / Decimal(110_000)
        assert entry.is_latest is True

    async def test_closed_week_is_not_reopened(self, db: AsyncSession) -> None:
        user = _user()
        await _credit(db, user, 40_000)
        repo = LeaderboardRepository()
        service = LeaderboardService(repo=repo)
        await service.open_week(db, WEEK_START, WEEK_END)
        await service.build_week(db, WEEK_START, WEEK_END, now=AFTER_WEEK)
        await _credit(db, user, 5_000)

        accounts = [
            a for a in await repo.load_account_weeks(db, WEEK_START, WEEK_END) if a.user_id == user
        ]
        await repo.open_snapshots_from(db, WEEK_START, WEEK_END, accounts)

        row = await _snapshot(db, user, WEEK_START)
        assert row.start_wallet_value == 40_000
        assert row.end_wallet_value == 40_000


class TestDepositsAreNotPerformance:
    async def test_week_opened_after_a_deposit(self, db: AsyncSession) -> None:
        # New account credited, then the app restarts and opens the week.
        user = _user()
        await _credit(db, user, 100_000)
        service = LeaderboardService()
        await service.open_week(db, WEEK_START, WEEK_END)
        await service.open_week(db, WEEK_START, WEEK_END)

        await service.build_week(db, WEEK_START, WEEK_END, now=AFTER_WEEK)

        entry = await _entry(db, user, WEEK_START)
        assert entry.start_account_value == 100_000
        assert entry.end_account_value == 100_000
        assert entry.deposits_during_week == 0
        assert entry.weekly_return == 0

    async def test_deposit_between_week_end_and_build(self, db: AsyncSession) -> None:
        user = _user()
        await _credit(db, user, 100_000)
        service = LeaderboardService()
        await service.open_week(db, WEEK_START, WEEK_END)
        # Lands after week_end but before the scheduled build reads balances.
        await _credit(db, user, 50_000)

        await service.build_week(db, WEEK_START, WEEK_END, now=AFTER_WEEK)
        await service.build_week(db, WEEK_END, NEXT_END, now=AFTER_NEXT)

        week = await _entry(db, user, WEEK_START)
        following = await _entry(db, user, WEEK_END)
        assert (week.end_account_value, week.deposits_during_week) == (150_000, 50_000)
        assert week.weekly_return == 0
        assert following.start_account_value == 150_000
        assert following.deposits_during_week == 0
        assert following.weekly_return == 0

    async def test_mid_week_joiner_starts_at_zero(self, db: AsyncSession) -> None:
        service = LeaderboardService()
        await service.open_week(db, WEEK_START, WEEK_END)
        user = _user()
        await _credit(db, user, 25_000)

        await service.build_week(db, WEEK_START, WEEK_END, now=AFTER_WEEK)

        entry = await _entry(db, user, WEEK_START)
        assert entry.start_account_value == 0
        assert entry.end_account_value == 25_000
        assert entry.deposits_during_week == 25_000
        assert entry.weekly_return == 0
        opened = await _snapshot(db, user, WEEK_END)
        assert opened.start_deposit_total == 25_000
