"""Domain models for published leaderboard rows."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class LeaderboardEntry:
    week_start: datetime
    week_end: datetime
    user_id: str
    rank: int
    start_wallet_value: int
    start_portfolio_value: int
    start_account_value: int
    end_wallet_value: int
    end_portfolio_value: int
    end_account_value: int
    deposits_during_week: int
    weekly_return: Decimal
    is_latest: bool
    created_at: datetime | None = None


@dataclass(frozen=True)
class BuildWeekResult:
    week_start: datetime
    week_end: datetime
    already_built: bool
    entries: int = 0
