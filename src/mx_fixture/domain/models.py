"""Domain models for mx_fixture: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from src.mx_common.enums import FixtureStatus, MatchResult


@dataclass
class Fixture:
    id: str
    external_id: int | None
    home_team_id: int
    away_team_id: int
    kickoff_at: datetime
    buy_close_at: datetime
    status: FixtureStatus
    result: MatchResult
    home_score: int | None = None
    away_score: int | None = None
    snapshot_home_cap: int | None = None   # cents, pre-match baseline
    snapshot_away_cap: int | None = None   # cents, pre-match baseline
    snapshot_at: datetime | None = None
    settled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_snapshot(self) -> bool:
        return self.snapshot_home_cap is not None and self.snapshot_away_cap is not None

    @property
    def is_settled(self) -> bool:
        return self.settled_at is not None

    def match_end_at(self, duration_minutes: int) -> datetime:
        return self.kickoff_at + timedelta(minutes=duration_minutes)

    def is_live_at(self, now: datetime, duration_minutes: int) -> bool:
        return self.kickoff_at <= now <= self.match_end_at(duration_minutes)


@dataclass(frozen=True)
class FeedMatch:
    """One match as reported by the external data source."""

    external_id: int
    status: str                 # FeedStatus value; unknown values pass through
    home_score: int | None
    away_score: int | None


@dataclass(frozen=True)
class FixtureUpdate:
    """A planned lifecycle write: the new status plus result/score."""

    status: FixtureStatus
    result: MatchResult
    home_score: int | None
    away_score: int | None
