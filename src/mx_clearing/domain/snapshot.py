"""Valuation snapshot store: pre-match baselines written onto the fixture.

A snapshot is written once, while the fixture is still SCHEDULED, by a single
conditional UPDATE that reads both teams' valuations in the same statement.
A miss is diagnosed afterwards and reported as an outcome, never raised.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.enums import FixtureStatus, SnapshotStatus
from src.mx_common.errors import FixtureNotFoundError, InternalError, InvalidAmountError

_CAPTURE_SQL = text("""
    UPDATE fixtures f
    SET snapshot_home_cap = h.market_cap,
        snapshot_away_cap = a.market_cap,
        snapshot_at = :now,
        updated_at = NOW()
    FROM teams h, teams a
    WHERE f.id = :fixture_id
      AND h.id = f.home_team_id
      AND a.id = f.away_team_id
      AND f.status = 'SCHEDULED'
      AND f.snapshot_home_cap IS NULL
      AND f.snapshot_away_cap IS NULL
      AND f.settled_at IS NULL
    RETURNING f.snapshot_home_cap, f.snapshot_away_cap
""")

# Operator repair for a settlement refused with MISSING_SNAPSHOT.
_BACKFILL_FROM_TEAMS_SQL = text("""
    UPDATE fixtures f
    SET snapshot_home_cap = h.market_cap,
        snapshot_away_cap = a.market_cap,
        snapshot_at = :now,
        updated_at = NOW()
    FROM teams h, teams a
    WHERE f.id = :fixture_id
      AND h.id = f.home_team_id
      AND a.id = f.away_team_id
      AND f.status <> 'POSTPONED'
      AND f.snapshot_home_cap IS NULL
      AND f.snapshot_away_cap IS NULL
      AND f.settled_at IS NULL
    RETURNING f.snapshot_home_cap, f.snapshot_away_cap
""")

_BACKFILL_EXPLICIT_SQL = text("""
    UPDATE fixtures
    SET snapshot_home_cap = :home_cap,
        snapshot_away_cap = :away_cap,
        snapshot_at = :now,
        updated_at = NOW()
    WHERE id = :fixture_id
      AND status <> 'POSTPONED'
      AND snapshot_home_cap IS NULL
      AND snapshot_away_cap IS NULL
      AND settled_at IS NULL
    RETURNING snapshot_home_cap, snapshot_away_cap
""")

_DIAGNOSE_SQL = text("""
    SELECT status, snapshot_home_cap, snapshot_away_cap, settled_at
    FROM fixtures
    WHERE id = :fixture_id
""")


@dataclass(frozen=True)
class SnapshotOutcome:
    fixture_id: str
    status: SnapshotStatus
    home_cap: int | None = None
    away_cap: int | None = None


async def capture_snapshot(fixture_id: str, db: AsyncSession, now: datetime) -> SnapshotOutcome:
    """Freeze both teams' current valuations onto a SCHEDULED fixture."""
    row = (await db.execute(_CAPTURE_SQL, {"fixture_id": fixture_id, "now": now})).fetchone()
    if row is not None:
        return SnapshotOutcome(
            fixture_id, SnapshotStatus.CAPTURED, row.snapshot_home_cap, row.snapshot_away_cap
        )
    return await _diagnose(fixture_id, db)


async def backfill_snapshot(
    fixture_id: str,
    db: AsyncSession,
    now: datetime,
    home_cap: int | None = None,
    away_cap: int | None = None,
) -> SnapshotOutcome:
    """Write a missing snapshot on any unsettled, non-postponed fixture.

    With both caps given they are used verbatim; with neither, current team
    valuations are read. Supplying only one is rejected.
    """
    if (home_cap is None) != (away_cap is None):
        raise InvalidAmountError(home_cap or away_cap or 0)
    if home_cap is not None and away_cap is not None:
        for cap in (home_cap, away_cap):
            if cap <= 0:
                raise InvalidAmountError(cap)
        result = await db.execute(
            _BACKFILL_EXPLICIT_SQL,
            {"fixture_id": fixture_id, "now": now, "home_cap": home_cap, "away_cap": away_cap},
        )
    else:
        result = await db.execute(_BACKFILL_FROM_TEAMS_SQL, {"fixture_id": fixture_id, "now": now})

    row = result.fetchone()
    if row is not None:
        return SnapshotOutcome(
            fixture_id, SnapshotStatus.CAPTURED, row.snapshot_home_cap, row.snapshot_away_cap
        )
    return await _diagnose(fixture_id, db)


async def _diagnose(fixture_id: str, db: AsyncSession) -> SnapshotOutcome:
    row = (await db.execute(_DIAGNOSE_SQL, {"fixture_id": fixture_id})).fetchone()
    if row is None:
        raise FixtureNotFoundError(fixture_id)
    if row.snapshot_home_cap is not None and row.snapshot_away_cap is not None:
        return SnapshotOutcome(
            fixture_id,
            SnapshotStatus.ALREADY_CAPTURED,
            row.snapshot_home_cap,
            row.snapshot_away_cap,
        )
    if row.settled_at is not None:
        return SnapshotOutcome(fixture_id, SnapshotStatus.ALREADY_SETTLED)
    if row.status != FixtureStatus.SCHEDULED.value:
        return SnapshotOutcome(fixture_id, SnapshotStatus.NOT_SCHEDULED)
    raise InternalError(f"Snapshot write matched no row for fixture {fixture_id}")
