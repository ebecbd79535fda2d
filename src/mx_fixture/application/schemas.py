"""Pydantic response schemas for mx_fixture API."""

from pydantic import BaseModel

from src.mx_fixture.application.tracker import TrackerSummary
from src.mx_fixture.domain.models import Fixture


class FixtureItem(BaseModel):
    id: str
    external_id: int | None
    home_team_id: int
    away_team_id: int
    kickoff_at: str
    buy_close_at: str
    status: str
    result: str
    home_score: int | None
    away_score: int | None
    snapshot_home_cap_cents: int | None
    snapshot_away_cap_cents: int | None
    settled: bool

    @classmethod
    def from_domain(cls, f: Fixture) -> "FixtureItem":
        return cls(
            id=f.id,
            external_id=f.external_id,
            home_team_id=f.home_team_id,
            away_team_id=f.away_team_id,
            kickoff_at=f.kickoff_at.isoformat(),
            buy_close_at=f.buy_close_at.isoformat(),
            status=f.status.value,
            result=f.result.value,
            home_score=f.home_score,
            away_score=f.away_score,
            snapshot_home_cap_cents=f.snapshot_home_cap,
            snapshot_away_cap_cents=f.snapshot_away_cap,
            settled=f.is_settled,
        )


class FixtureListResponse(BaseModel):
    items: list[FixtureItem]


class TrackerSummaryResponse(BaseModel):
    checked: int
    updated: int
    snapshots: int
    settled: int
    errors: int

    @classmethod
    def from_summary(cls, s: TrackerSummary) -> "TrackerSummaryResponse":
        return cls(
            checked=s.checked,
            updated=s.updated,
            snapshots=s.snapshots,
            settled=s.settled,
            errors=s.errors,
        )
