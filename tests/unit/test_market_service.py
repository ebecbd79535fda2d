"""TeamApplicationService and FixtureApplicationService reads."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.mx_common.enums import FixtureStatus, MatchResult
from src.mx_common.errors import FixtureNotFoundError, TeamNotFoundError
from src.mx_fixture.application.service import FixtureApplicationService
from src.mx_fixture.domain.models import Fixture
from src.mx_market.application.service import TeamApplicationService
from src.mx_market.domain.models import Team
from tests.unit.helpers import mock_db, result_with_row


def _team(team_id: int = 57, market_cap: int = 1_000_000) -> Team:
    return Team(id=team_id, name="Arsenal FC", short_name="Arsenal", market_cap=market_cap,
                total_shares=1000, available_shares=900)


class TestTeamService:
    async def test_list_teams_includes_price(self) -> None:
        repo = AsyncMock()
        repo.list_teams.return_value = [_team(), _team(61, 750_500)]

        resp = await TeamApplicationService(repo=repo).list_teams(AsyncMock())

        assert [t.price_per_share_cents for t in resp.items] == [1000, 750]
        assert resp.items[0].market_cap_display == "$10,000.00"

    async def test_unknown_team(self) -> None:
        repo = AsyncMock()
        repo.get_team.return_value = None
        with pytest.raises(TeamNotFoundError):
            await TeamApplicationService(repo=repo).get_team(AsyncMock(), 999)

    async def test_trading_status_open_without_fixtures(self) -> None:
        repo = AsyncMock()
        repo.get_team.return_value = _team()
        db = mock_db(result_with_row(None), result_with_row(None))

        resp = await TeamApplicationService(repo=repo).get_trading_status(db, 57)

        assert resp.is_open is True
        assert resp.next_close_at is None

    def test_shares_outstanding(self) -> None:
        assert _team().shares_outstanding == 100


class TestFixtureService:
    async def test_get_fixture(self) -> None:
        kickoff = datetime(2026, 3, 14, 15, 0, tzinfo=UTC)
        repo = AsyncMock()
        repo.get_fixture.return_value = Fixture(
            id="fx-1", external_id=1, home_team_id=57, away_team_id=61, kickoff_at=kickoff,
            buy_close_at=kickoff - timedelta(minutes=30), status=FixtureStatus.APPLIED,
            result=MatchResult.HOME_WIN, home_score=1, away_score=0,
        )

        item = await FixtureApplicationService(repo=repo).get_fixture(AsyncMock(), "fx-1")

        assert item.status == "APPLIED"
        assert item.result == "HOME_WIN"
        assert item.settled is False

    async def test_missing_fixture(self) -> None:
        repo = AsyncMock()
        repo.get_fixture.return_value = None
        with pytest.raises(FixtureNotFoundError):
            await FixtureApplicationService(repo=repo).get_fixture(AsyncMock(), "nope")
