"""settle_fixture and ClearingService.settle against a scripted session."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.mx_clearing.application.service import ClearingService
from src.mx_clearing.domain.settlement import settle_fixture
from src.mx_common.enums import MatchResult, SettlementStatus
from src.mx_common.errors import FixtureNotFoundError, TeamNotFoundError
from src.mx_common.events import SettlementCompleted
from tests.unit.helpers import mock_db, result_with_row, row

KICKOFF = datetime(2026, 3, 14, 15, 0, tzinfo=UTC)
NOW = KICKOFF + timedelta(hours=2)
BPS = 1000


def _fixture_row(
    status: str = "APPLIED",
    result: str = "HOME_WIN",
    home_cap: int | None = 100,
    away_cap: int | None = 100,
    settled_at: datetime | None = None,
) -> object:
    return row(
        id="fx-1", external_id=100, home_team_id=1, away_team_id=2,
        kickoff_at=KICKOFF, buy_close_at=KICKOFF - timedelta(minutes=30),
        status=status, result=result, home_score=2, away_score=0,
        snapshot_home_cap=home_cap, snapshot_away_cap=away_cap,
        snapshot_at=KICKOFF - timedelta(minutes=30) if home_cap is not None else None,
        settled_at=settled_at, created_at=KICKOFF, updated_at=KICKOFF,
    )


class TestSettleFixture:
    async def test_home_win_moves_ten_percent_of_loser(self) -> None:
        db = mock_db(
            result_with_row(_fixture_row()),
            result_with_row(row(id=1)),                 # claim
            result_with_row(row(market_cap=110)),       # home +10
            result_with_row(row(market_cap=90)),        # away -10
            result_with_row(row(id="fx-1")),            # mark settled
        )

        outcome = await settle_fixture("fx-1", db, NOW, BPS)

        assert outcome.status == SettlementStatus.SETTLED
        assert outcome.transfer_amount == 10
        assert outcome.winner_team_id == 1
        assert outcome.loser_team_id == 2
        assert (outcome.home_cap_after, outcome.away_cap_after) == (110, 90)
        home_params = db.execute.await_args_list[2].args[1]
        away_params = db.execute.await_args_list[3].args[1]
        assert home_params == {"team_id": 1, "delta": 10}
        assert away_params == {"team_id": 2, "delta": -10}

    async def test_away_win_uses_home_snapshot(self) -> None:
        db = mock_db(
            result_with_row(_fixture_row(result="AWAY_WIN", home_cap=5000, away_cap=100)),
            result_with_row(row(id=1)),
            result_with_row(row(market_cap=4500)),
            result_with_row(row(market_cap=600)),
            result_with_row(row(id="fx-1")),
        )

        outcome = await settle_fixture("fx-1", db, NOW, BPS)

        assert outcome.transfer_amount == 500
        assert db.execute.await_args_list[2].args[1] == {"team_id": 1, "delta": -500}
        assert db.execute.await_args_list[3].args[1] == {"team_id": 2, "delta": 500}

    async def test_draw_leaves_valuations_alone(self) -> None:
        db = mock_db(
            result_with_row(_fixture_row(result="DRAW")),
            result_with_row(row(id=1)),
            result_with_row(row(id="fx-1")),
        )

        outcome = await settle_fixture("fx-1", db, NOW, BPS)

        assert outcome.status == SettlementStatus.SETTLED
        assert outcome.result == MatchResult.DRAW
        assert outcome.transfer_amount == 0
        assert db.execute.await_count == 3

    async def test_already_settled_is_noop(self) -> None:
        db = mock_db(result_with_row(_fixture_row(settled_at=NOW)))
        outcome = await settle_fixture("fx-1", db, NOW, BPS)
        assert outcome.status == SettlementStatus.ALREADY_SETTLED
        assert db.execute.await_count == 1

    async def test_lost_claim_is_already_settled(self) -> None:
        db = mock_db(result_with_row(_fixture_row()), result_with_row(None))
        outcome = await settle_fixture("fx-1", db, NOW, BPS)
        assert outcome.status == SettlementStatus.ALREADY_SETTLED
        assert db.execute.await_count == 2

    async def test_missing_snapshot_refused(self) -> None:
        db = mock_db(result_with_row(_fixture_row(home_cap=None, away_cap=None)))
        outcome = await settle_fixture("fx-1", db, NOW, BPS)
        assert outcome.status == SettlementStatus.MISSING_SNAPSHOT
        assert db.execute.await_count == 1

    async def test_pending_result_refused(self) -> None:
        db = mock_db(result_with_row(_fixture_row(result="PENDING")))
        outcome = await settle_fixture("fx-1", db, NOW, BPS)
        assert outcome.status == SettlementStatus.RESULT_PENDING

    async def test_not_applied_refused(self) -> None:
        db = mock_db(result_with_row(_fixture_row(status="CLOSED", result="PENDING")))
        outcome = await settle_fixture("fx-1", db, NOW, BPS)
        assert outcome.status == SettlementStatus.NOT_APPLIED

    async def test_unknown_fixture_raises(self) -> None:
        db = mock_db(result_with_row(None))
        with pytest.raises(FixtureNotFoundError):
            await settle_fixture("nope", db, NOW, BPS)


class TestClearingServiceSettle:
    async def test_commits_and_publishes(self) -> None:
        publisher = AsyncMock()
        db = mock_db(
            result_with_row(_fixture_row()),
            result_with_row(row(id=1)),
            result_with_row(row(market_cap=110)),
            result_with_row(row(market_cap=90)),
            result_with_row(row(id="fx-1")),
        )

        outcome = await ClearingService(publisher=publisher, transfer_bps=BPS).settle(
            db, "fx-1", NOW
        )

        assert outcome.status == SettlementStatus.SETTLED
        db.commit.assert_awaited_once()
        event = publisher.publish.await_args.args[0]
        assert isinstance(event, SettlementCompleted)
        assert event.result == "HOME_WIN"
        assert event.transfer_amount == 10

    async def test_refusal_not_published(self) -> None:
        publisher = AsyncMock()
        db = mock_db(result_with_row(_fixture_row(home_cap=None, away_cap=None)))

        outcome = await ClearingService(publisher=publisher).settle(db, "fx-1", NOW)

        assert outcome.status == SettlementStatus.MISSING_SNAPSHOT
        publisher.publish.assert_not_awaited()

    async def test_team_update_failure_rolls_back(self) -> None:
        db = mock_db(
            result_with_row(_fixture_row()),
            result_with_row(row(id=1)),
            result_with_row(None),                      # home team missing
        )

        with pytest.raises(TeamNotFoundError):
            await ClearingService(publisher=AsyncMock(), transfer_bps=BPS).settle(
                db, "fx-1", NOW
            )

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
