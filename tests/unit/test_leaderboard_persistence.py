"""LeaderboardRepository parameter mapping against a scripted session."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import MagicMock

from src.mx_leaderboard.domain.ranking import AccountWeek
from src.mx_leaderboard.infrastructure.persistence import LeaderboardRepository
from tests.unit.helpers import mock_db, row

WEEK_START = datetime(2026, 3, 8, 20, 0, tzinfo=UTC)
WEEK_END = WEEK_START + timedelta(days=7)

ACCOUNT = AccountWeek(
    user_id="u1",
    start_wallet=90_000,
    start_portfolio=10_000,
    end_wallet=140_000,
    end_portfolio=11_000,
    deposits=50_000,
    deposit_total=150_000,
)


def _rows(*rows: object) -> MagicMock:
    result = MagicMock()
    result.fetchall.return_value = list(rows)
    return result


class TestLoadAccountWeeks:
    async def test_numeric_sums_become_ints(self) -> None:
        db = mock_db(
            _rows(
                row(user_id="u1", start_wallet=Decimal(90_000), start_portfolio=Decimal(10_000),
                    end_wallet=140_000, end_portfolio=Decimal(11_000),
                    deposit_total=Decimal(150_000), deposits=Decimal(50_000)),
            )
        )

        accounts = await LeaderboardRepository().load_account_weeks(db, WEEK_START, WEEK_END)

        assert accounts == [ACCOUNT]
        assert db.execute.await_args.args[1] == {"week_start": WEEK_START, "week_end": WEEK_END}


class TestSnapshotRows:
    async def test_close_records_end_deposit_total(self) -> None:
        db = mock_db(MagicMock())

        await LeaderboardRepository().close_week_snapshots(db, WEEK_START, WEEK_END, [ACCOUNT])

        (params,) = db.execute.await_args.args[1]
        assert params["end_account_value"] == 151_000
        assert params["end_deposit_total"] == 150_000
        assert params["deposits_during_week"] == 50_000

    async def test_next_week_opens_from_end_values(self) -> None:
        db = mock_db(MagicMock())

        await LeaderboardRepository().open_snapshots_from(
            db, WEEK_END, WEEK_END + timedelta(days=7), [ACCOUNT]
        )

        (params,) = db.execute.await_args.args[1]
        assert params["week_start"] == WEEK_END
        assert params["start_wallet_value"] == ACCOUNT.end_wallet
        assert params["start_portfolio_value"] == ACCOUNT.end_portfolio
        assert params["start_account_value"] == ACCOUNT.end_account_value
        assert params["start_deposit_total"] == ACCOUNT.deposit_total

    async def test_empty_batches_skip_the_database(self) -> None:
        db = mock_db()
        repo = LeaderboardRepository()

        await repo.close_week_snapshots(db, WEEK_START, WEEK_END, [])
        await repo.open_snapshots_from(db, WEEK_START, WEEK_END, [])

        db.execute.assert_not_awaited()

    async def test_open_week_counts_inserted_rows(self) -> None:
        db = mock_db(_rows(row(user_id="a"), row(user_id="b")))

        opened = await LeaderboardRepository().open_week_from_balances(db, WEEK_START, WEEK_END)

        assert opened == 2
