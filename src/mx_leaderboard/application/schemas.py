"""Pydantic schemas for the leaderboard API."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from src.mx_common.cents import cents_to_display
from src.mx_leaderboard.domain.models import BuildWeekResult, LeaderboardEntry
from src.mx_leaderboard.domain.returns import format_return_percent


class BuildWeekRequest(BaseModel):
    """Explicit bounds; omit both to build the week that just ended."""

    week_start: datetime | None = None
    week_end: datetime | None = None

    @model_validator(mode="after")
    def _both_or_neither(self) -> "BuildWeekRequest":
        if (self.week_start is None) != (self.week_end is None):
            raise ValueError("week_start and week_end must be given together")
        if self.week_start and self.week_end and self.week_end <= self.week_start:
            raise ValueError("week_end must be after week_start")
        return self


class BuildWeekResponse(BaseModel):
    week_start: str
    week_end: str
    already_built: bool
    entries: int

    @classmethod
    def from_result(cls, r: BuildWeekResult) -> "BuildWeekResponse":
        return cls(
            week_start=r.week_start.isoformat(),
            week_end=r.week_end.isoformat(),
            already_built=r.already_built,
            entries=r.entries,
        )


class LeaderboardEntryItem(BaseModel):
    rank: int
    user_id: str
    start_account_value_cents: int
    end_account_value_cents: int
    end_account_value_display: str
    deposits_during_week_cents: int
    weekly_return: str = Field(..., description="Exact ratio as a decimal string")
    weekly_return_display: str

    @classmethod
    def from_domain(cls, e: LeaderboardEntry) -> "LeaderboardEntryItem":
        return cls(
            rank=e.rank,
            user_id=e.user_id,
            start_account_value_cents=e.start_account_value,
            end_account_value_cents=e.end_account_value,
            end_account_value_display=cents_to_display(e.end_account_value),
            deposits_during_week_cents=e.deposits_during_week,
            weekly_return=str(e.weekly_return),
            weekly_return_display=format_return_percent(e.weekly_return),
        )


class LeaderboardResponse(BaseModel):
    week_start: str | None
    week_end: str | None
    items: list[LeaderboardEntryItem]

    @classmethod
    def from_entries(cls, entries: list[LeaderboardEntry]) -> "LeaderboardResponse":
        first = entries[0] if entries else None
        return cls(
            week_start=first.week_start.isoformat() if first else None,
            week_end=first.week_end.isoformat() if first else None,
            items=[LeaderboardEntryItem.from_domain(e) for e in entries],
        )
