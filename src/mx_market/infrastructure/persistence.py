"""TeamRepository: read side of the teams table.

Valuation writes live with the Settlement Engine and share reservation with the
purchase path; this repository never mutates a team.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_market.domain.models import Team

_TEAM_COLUMNS = """
    id, name, short_name, market_cap, total_shares, available_shares,
    created_at, updated_at
"""

_GET_TEAM_SQL = text(f"SELECT {_TEAM_COLUMNS} FROM teams WHERE id = :team_id")

_LIST_TEAMS_SQL = text(f"SELECT {_TEAM_COLUMNS} FROM teams ORDER BY market_cap DESC, id ASC")


def _row_to_team(row: Any) -> Team:
    return Team(
        id=row.id,
        name=row.name,
        short_name=row.short_name,
        market_cap=row.market_cap,
        total_shares=row.total_shares,
        available_shares=row.available_shares,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class TeamRepository:
    async def get_team(self, db: AsyncSession, team_id: int) -> Team | None:
        result = await db.execute(_GET_TEAM_SQL, {"team_id": team_id})
        row = result.fetchone()
        return _row_to_team(row) if row is not None else None

    async def list_teams(self, db: AsyncSession) -> list[Team]:
        result = await db.execute(_LIST_TEAMS_SQL)
        return [_row_to_team(row) for row in result.fetchall()]
