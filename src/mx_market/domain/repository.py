"""Repository Protocol for teams."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_market.domain.models import Team


class TeamRepositoryProtocol(Protocol):
    async def get_team(self, db: AsyncSession, team_id: int) -> Team | None: ...

    async def list_teams(self, db: AsyncSession) -> list[Team]: ...
