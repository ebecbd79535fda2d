"""FixtureRepository: raw SQL access to the fixtures table.

Status writes are conditional on the status the caller last read
(`WHERE status = :expected`), so two overlapping tracker runs cannot move a
fixture twice or backwards. Snapshot and settlement writes live in
mx_clearing.

Transaction ownership: the CALLER commits or rolls back.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.enums import FixtureStatus, MatchResult
from src.mx_fixture.domain.models import Fixture, FixtureUpdate

FIXTURE_COLUMNS = """
    id, external_id, home_team_id, away_team_id, kickoff_at, buy_close_at,
    status, result, home_score, away_score,
    snapshot_home_cap, snapshot_away_cap, snapshot_at, settled_at,
    created_at, updated_at
"""

_GET_FIXTURE_SQL = text(f"SELECT {FIXTURE_COLUMNS} FROM fixtures WHERE id = :fixture_id")

_LIST_TRACKING_WINDOW_SQL = text(f"""
    SELECT {FIXTURE_COLUMNS}
    FROM fixtures
    WHERE kickoff_at <= :until
      AND (
            (status IN ('SCHEDULED', 'CLOSED') AND kickoff_at >= :since)
         OR (status = 'APPLIED' AND settled_at IS NULL AND kickoff_at >= :settle_since)
      )
    ORDER BY kickoff_at ASC, id ASC
""")

_APPLY_UPDATE_SQL = text("""
    UPDATE fixtures
    SET status = :new_status,
        result = :result,
        home_score = :home_score,
        away_score = :away_score,
        updated_at = NOW()
    WHERE id = :fixture_id
      AND status = :expected_status
      AND settled_at IS NULL
    RETURNING id
""")

_LIST_FIXTURES_SQL = text(f"""
    SELECT {FIXTURE_COLUMNS}
    FROM fixtures
    WHERE (CAST(:status AS TEXT) IS NULL OR status = :status)
    ORDER BY kickoff_at DESC, id ASC
    LIMIT :limit
""")


def row_to_fixture(row: Any) -> Fixture:
    return Fixture(
        id=row.id,
        external_id=row.external_id,
        home_team_id=row.home_team_id,
        away_team_id=row.away_team_id,
        kickoff_at=row.kickoff_at,
        buy_close_at=row.buy_close_at,
        status=FixtureStatus(row.status),
        result=MatchResult(row.result),
        home_score=row.home_score,
        away_score=row.away_score,
        snapshot_home_cap=row.snapshot_home_cap,
        snapshot_away_cap=row.snapshot_away_cap,
        snapshot_at=row.snapshot_at,
        settled_at=row.settled_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class FixtureRepository:
    async def get_fixture(self, db: AsyncSession, fixture_id: str) -> Fixture | None:
        result = await db.execute(_GET_FIXTURE_SQL, {"fixture_id": fixture_id})
        row = result.fetchone()
        return row_to_fixture(row) if row is not None else None

    async def list_tracking_window(
        self, db: AsyncSession, since: datetime, until: datetime, settle_since: datetime
    ) -> list[Fixture]:
        """Open fixtures kicking off in [since, until], plus unsettled APPLIED ones
        back to settle_since."""
        result = await db.execute(
            _LIST_TRACKING_WINDOW_SQL,
            {"since": since, "until": until, "settle_since": settle_since},
        )
        return [row_to_fixture(row) for row in result.fetchall()]

    async def apply_update(
        self,
        db: AsyncSession,
        fixture_id: str,
        expected_status: FixtureStatus,
        update: FixtureUpdate,
    ) -> bool:
        """Returns False when another writer moved the fixture first."""
        result = await db.execute(
            _APPLY_UPDATE_SQL,
            {
                "fixture_id": fixture_id,
                "expected_status": expected_status.value,
                "new_status": update.status.value,
                "result": update.result.value,
                "home_score": update.home_score,
                "away_score": update.away_score,
            },
        )
        return result.fetchone() is not None

    async def list_fixtures(
        self, db: AsyncSession, status: FixtureStatus | None, limit: int
    ) -> list[Fixture]:
        result = await db.execute(
            _LIST_FIXTURES_SQL,
            {"status": status.value if status else None, "limit": limit},
        )
        return [row_to_fixture(row) for row in result.fetchall()]
