"""Pydantic schemas for snapshot and settlement operations."""

from pydantic import BaseModel, Field

from src.mx_clearing.domain.settlement import SettlementOutcome
from src.mx_clearing.domain.snapshot import SnapshotOutcome


class BackfillSnapshotRequest(BaseModel):
    """Both caps or neither; neither means 'use current team valuations'."""

    home_cap_cents: int | None = Field(None, gt=0)
    away_cap_cents: int | None = Field(None, gt=0)


class SnapshotResponse(BaseModel):
    fixture_id: str
    status: str
    snapshot_home_cap_cents: int | None
    snapshot_away_cap_cents: int | None

    @classmethod
    def from_outcome(cls, outcome: SnapshotOutcome) -> "SnapshotResponse":
        return cls(
            fixture_id=outcome.fixture_id,
            status=outcome.status.value,
            snapshot_home_cap_cents=outcome.home_cap,
            snapshot_away_cap_cents=outcome.away_cap,
        )


class SettlementResponse(BaseModel):
    fixture_id: str
    status: str
    result: str | None
    transfer_amount_cents: int
    winner_team_id: int | None
    loser_team_id: int | None
    home_cap_after_cents: int | None
    away_cap_after_cents: int | None

    @classmethod
    def from_outcome(cls, outcome: SettlementOutcome) -> "SettlementResponse":
        return cls(
            fixture_id=outcome.fixture_id,
            status=outcome.status.value,
            result=outcome.result.value if outcome.result else None,
            transfer_amount_cents=outcome.transfer_amount,
            winner_team_id=outcome.winner_team_id,
            loser_team_id=outcome.loser_team_id,
            home_cap_after_cents=outcome.home_cap_after,
            away_cap_after_cents=outcome.away_cap_after,
        )
