"""LeaderboardService.build_week over a mocked repository."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from src.mx_common.errors import InvalidIdentifierError, InvalidWeekError, WeekNotEndedError
from src.mx_leaderboard.application.service import LeaderboardService
from src.mx_leaderboard.domain.models import LeaderboardEntry
from src.mx_leaderboard.domain.ranking import AccountWeek

WEEK_START = datetime(2026, 3, 8, 20, 0, tzinfo=UTC)   # Monday 00:00 Asia/Dubai
WEEK_END = WEEK_START + timedelta(days=7)


def _accounts() -> list[AccountWeek]:
    return [
        AccountWeek("u1", 1000, 0, 950, 0, 200),
        AccountWeek("u2", 100, 0, 160, 0, 50),
    ]


def _repo(claimed: bool = True) -> MagicMock:
    repo = MagicMock()
    for name in (
        "claim_week", "clear_latest", "load_account_weeks", "insert_entries",
        "close_week_snapshots", "open_snapshots_from", "record_entry_count",
        "open_week_from_balances", "list_latest", "list_week",
    ):
        setattr(repo, name, AsyncMock())
    repo.claim_week.return_value = claimed
    repo.load_account_weeks.return_value = _accounts()
    return repo


class TestBuildWeek:
    async def test_builds_and_commits(self) -> None:
        repo = _repo()
        db = AsyncMock()

        result = await LeaderboardService(repo=repo).build_week(db, WEEK_START, WEEK_END)

        assert result.already_built is False
        assert result.entries == 2
        ranked = repo.insert_entries.await_args.args[3]
        assert [e.account.user_id for e in ranked] == ["u2", "u1"]
        repo.record_entry_count.assert_awaited_once_with(db, WEEK_START, WEEK_END, 2)
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    async def test_latest_flag_cleared_before_insert(self) -> None:
        repo = _repo()
        order = MagicMock()
        order.attach_mock(repo.clear_latest, "clear_latest")
        order.attach_mock(repo.insert_entries, "insert_entries")

        await LeaderboardService(repo=repo).build_week(AsyncMock(), WEEK_START, WEEK_END)

        names = [c[0] for c in order.mock_calls]
        assert names.index("clear_latest") < names.index("insert_entries")

    async def test_next_week_opens_from_closing_values(self) -> None:
        repo = _repo()
        db = AsyncMock()

        await LeaderboardService(repo=repo).build_week(db, WEEK_START, WEEK_END)

        accounts = repo.load_account_weeks.return_value
        repo.close_week_snapshots.assert_awaited_once_with(db, WEEK_START, WEEK_END, accounts)
        repo.open_snapshots_from.assert_awaited_once_with(
            db, WEEK_END, WEEK_END + timedelta(days=7), accounts
        )

    async def test_already_built_is_noop(self) -> None:
        repo = _repo(claimed=False)
        db = AsyncMock()

        result = await LeaderboardService(repo=repo).build_week(db, WEEK_START, WEEK_END)

        assert result.already_built is True
        assert result.entries == 0
        repo.clear_latest.assert_not_awaited()
        repo.insert_entries.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_failure_rolls_back(self) -> None:
        repo = _repo()
        repo.insert_entries.side_effect = RuntimeError("disk full")
        db = AsyncMock()

        with pytest.raises(RuntimeError):
            await LeaderboardService(repo=repo).build_week(db, WEEK_START, WEEK_END)

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
        repo.open_snapshots_from.assert_not_awaited()

    async def test_inverted_bounds_rejected(self) -> None:
        repo = _repo()
        with pytest.raises(InvalidIdentifierError):
            await LeaderboardService(repo=repo).build_week(AsyncMock(), WEEK_END, WEEK_START)
        repo.claim_week.assert_not_awaited()

    async def test_week_still_running_rejected(self) -> None:
        repo = _repo()
        db = AsyncMock()
        with pytest.raises(WeekNotEndedError):
            await LeaderboardService(repo=repo).build_week(
                db, WEEK_START, WEEK_END, now=WEEK_END - timedelta(hours=1)
            )
        repo.claim_week.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_builds_once_week_has_ended(self) -> None:
        repo = _repo()
        result = await LeaderboardService(repo=repo).build_week(
            AsyncMock(), WEEK_START, WEEK_END, now=WEEK_END
        )
        assert result.already_built is False

    @pytest.mark.parametrize(
        ("start", "end"),
        [
            (WEEK_START + timedelta(days=1), WEEK_END + timedelta(days=1)),
            (WEEK_START, WEEK_END - timedelta(days=1)),
            (datetime(2026, 3, 9, tzinfo=UTC), datetime(2026, 3, 16, tzinfo=UTC)),
            (WEEK_START.replace(tzinfo=None), WEEK_END.replace(tzinfo=None)),
        ],
        ids=["tuesday-start", "short-week", "utc-midnight", "naive"],
    )
    async def test_misaligned_week_rejected(self, start: datetime, end: datetime) -> None:
        repo = _repo()
        with pytest.raises(InvalidWeekError):
            await LeaderboardService(repo=repo).build_week(
                AsyncMock(), start, end, now=WEEK_END + timedelta(days=30)
            )
        repo.claim_week.assert_not_awaited()


class TestOpenWeek:
    async def test_open_current_week_uses_local_monday(self) -> None:
        repo = _repo()
        repo.open_week_from_balances.return_value = 3
        db = AsyncMock()
        wednesday = WEEK_START + timedelta(days=2, hours=5)

        opened = await LeaderboardService(repo=repo).open_current_week(db, now=wednesday)

        assert opened == 3
        assert repo.open_week_from_balances.await_args == call(db, WEEK_START, WEEK_END)
        db.commit.assert_awaited_once()


class TestReads:
    async def test_get_latest_formats_returns(self) -> None:
        repo = _repo()
        repo.list_latest.return_value = [
            LeaderboardEntry(
                week_start=WEEK_START, week_end=WEEK_END, user_id="u2", rank=1,
                start_wallet_value=100, start_portfolio_value=0, start_account_value=100,
                end_wallet_value=160, end_portfolio_value=0, end_account_value=160,
                deposits_during_week=50, weekly_return=Decimal(10) / Decimal(150),
                is_latest=True,
            )
        ]

        resp = await LeaderboardService(repo=repo).get_latest(MagicMock())

        assert resp.week_start == WEEK_START.isoformat()
        assert resp.items[0].weekly_return_display == "+6.67%"
        assert resp.items[0].end_account_value_display == "$1.60"

    async def test_empty_week(self) -> None:
        repo = _repo()
        repo.list_week.return_value = []
        resp = await LeaderboardService(repo=repo).get_week(MagicMock(), WEEK_START)
        assert resp.items == []
        assert resp.week_start is None
