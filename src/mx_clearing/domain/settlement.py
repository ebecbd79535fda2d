"""Settlement engine: exactly-once value transfer for an APPLIED fixture.

Everything runs inside the caller's transaction:

1. Lock the fixture row and check preconditions (refusals are outcomes).
2. Claim the settlement: INSERT ... ON CONFLICT (fixture_id) DO NOTHING.
   No row back means another run already settled it.
3. Move valuation between the teams from the pre-match snapshots.
4. Stamp fixtures.settled_at.

If any step raises, the caller rolls back and nothing is applied.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_clearing.domain.transfer import TransferPlan, compute_transfer
from src.mx_common.enums import FixtureStatus, MatchResult, SettlementStatus
from src.mx_common.errors import FixtureNotFoundError, InternalError, TeamNotFoundError
from src.mx_fixture.infrastructure.persistence import FIXTURE_COLUMNS, row_to_fixture

logger = logging.getLogger(__name__)

_LOCK_FIXTURE_SQL = text(f"SELECT {FIXTURE_COLUMNS} FROM fixtures WHERE id = :fixture_id FOR UPDATE")

_CLAIM_SETTLEMENT_SQL = text("""
    INSERT INTO settlements
        (fixture_id, result, winner_team_id, loser_team_id,
         snapshot_home_cap, snapshot_away_cap, transfer_amount, settled_at)
    VALUES
        (:fixture_id, :result, :winner_team_id, :loser_team_id,
         :snapshot_home_cap, :snapshot_away_cap, :transfer_amount, :settled_at)
    ON CONFLICT (fixture_id) DO NOTHING
    RETURNING id
""")

_ADJUST_MARKET_CAP_SQL = text("""
    UPDATE teams
    SET market_cap = market_cap + :delta,
        updated_at = NOW()
    WHERE id = :team_id
    RETURNING market_cap
""")

_MARK_SETTLED_SQL = text("""
    UPDATE fixtures
    SET settled_at = :settled_at,
        updated_at = NOW()
    WHERE id = :fixture_id AND settled_at IS NULL
    RETURNING id
""")


@dataclass(frozen=True)
class SettlementOutcome:
    fixture_id: str
    status: SettlementStatus
    result: MatchResult | None = None
    home_team_id: int | None = None
    away_team_id: int | None = None
    transfer_amount: int = 0
    winner_team_id: int | None = None
    loser_team_id: int | None = None
    home_cap_after: int | None = None
    away_cap_after: int | None = None


async def settle_fixture(
    fixture_id: str,
    db: AsyncSession,
    now: datetime,
    transfer_bps: int,
) -> SettlementOutcome:
    row = (await db.execute(_LOCK_FIXTURE_SQL, {"fixture_id": fixture_id})).fetchone()
    if row is None:
        raise FixtureNotFoundError(fixture_id)
    fixture = row_to_fixture(row)

    if fixture.is_settled:
        return SettlementOutcome(fixture_id, SettlementStatus.ALREADY_SETTLED, fixture.result)
    if fixture.status != FixtureStatus.APPLIED:
        return SettlementOutcome(fixture_id, SettlementStatus.NOT_APPLIED, fixture.result)
    if fixture.result == MatchResult.PENDING:
        return SettlementOutcome(fixture_id, SettlementStatus.RESULT_PENDING, fixture.result)
    if not fixture.has_snapshot:
        logger.warning("Settlement refused for fixture %s: snapshot missing", fixture_id)
        return SettlementOutcome(fixture_id, SettlementStatus.MISSING_SNAPSHOT, fixture.result)

    plan: TransferPlan = compute_transfer(
        fixture.result,
        fixture.home_team_id,
        fixture.away_team_id,
        fixture.snapshot_home_cap,  # type: ignore[arg-type]
        fixture.snapshot_away_cap,  # type: ignore[arg-type]
        transfer_bps,
    )

    claimed = await db.execute(
        _CLAIM_SETTLEMENT_SQL,
        {
            "fixture_id": fixture_id,
            "result": plan.result.value,
            "winner_team_id": plan.winner_team_id,
            "loser_team_id": plan.loser_team_id,
            "snapshot_home_cap": fixture.snapshot_home_cap,
            "snapshot_away_cap": fixture.snapshot_away_cap,
            "transfer_amount": plan.amount,
            "settled_at": now,
        },
    )
    if claimed.fetchone() is None:
        return SettlementOutcome(fixture_id, SettlementStatus.ALREADY_SETTLED, fixture.result)

    home_cap_after: int | None = None
    away_cap_after: int | None = None
    if plan.amount > 0:
        home_cap_after = await _adjust_market_cap(
            db, fixture.home_team_id, plan.delta_for(fixture.home_team_id)
        )
        away_cap_after = await _adjust_market_cap(
            db, fixture.away_team_id, plan.delta_for(fixture.away_team_id)
        )

    marked = await db.execute(_MARK_SETTLED_SQL, {"fixture_id": fixture_id, "settled_at": now})
    if marked.fetchone() is None:
        raise InternalError(f"Fixture {fixture_id} settled_at already set under lock")

    return SettlementOutcome(
        fixture_id=fixture_id,
        status=SettlementStatus.SETTLED,
        result=plan.result,
        home_team_id=fixture.home_team_id,
        away_team_id=fixture.away_team_id,
        transfer_amount=plan.amount,
        winner_team_id=plan.winner_team_id,
        loser_team_id=plan.loser_team_id,
        home_cap_after=home_cap_after,
        away_cap_after=away_cap_after,
    )


async def _adjust_market_cap(db: AsyncSession, team_id: int, delta: int) -> int:
    row = (
        await db.execute(_ADJUST_MARKET_CAP_SQL, {"team_id": team_id, "delta": delta})
    ).fetchone()
    if row is None:
        raise TeamNotFoundError(team_id)
    return int(row.market_cap)
