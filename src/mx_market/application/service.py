"""TeamApplicationService: read-only; no commit/rollback needed."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.datetime_utils import utc_now
from src.mx_common.errors import TeamNotFoundError
from src.mx_market.application.schemas import (
    TeamItem,
    TeamListResponse,
    TradingStatusResponse,
)
from src.mx_market.domain.repository import TeamRepositoryProtocol
from src.mx_market.infrastructure.persistence import TeamRepository
from src.mx_risk.rules.trading_window import check_trading_window


class TeamApplicationService:
    def __init__(self, repo: TeamRepositoryProtocol | None = None) -> None:
        self._repo: TeamRepositoryProtocol = repo or TeamRepository()

    async def list_teams(self, db: AsyncSession) -> TeamListResponse:
        teams = await self._repo.list_teams(db)
        return TeamListResponse(items=[TeamItem.from_domain(t) for t in teams])

    async def get_team(self, db: AsyncSession, team_id: int) -> TeamItem:
        team = await self._repo.get_team(db, team_id)
        if team is None:
            raise TeamNotFoundError(team_id)
        return TeamItem.from_domain(team)

    async def get_trading_status(self, db: AsyncSession, team_id: int) -> TradingStatusResponse:
        team = await self._repo.get_team(db, team_id)
        if team is None:
            raise TeamNotFoundError(team_id)
        status = await check_trading_window(team_id, db, utc_now())
        return TradingStatusResponse.from_status(team_id, status)
