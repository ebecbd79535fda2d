"""Domain models for mx_account: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.mx_common.cents import price_per_share


@dataclass
class Account:
    id: str
    user_id: str
    wallet_balance: int      # cents, >= 0
    version: int
    created_at: datetime
    updated_at: datetime


@dataclass
class Position:
    user_id: str
    team_id: int
    quantity: int = 0
    total_invested: int = 0   # cents, total purchase cost (not avg price)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ValuedPosition:
    """A position joined with its team's current valuation."""

    team_id: int
    team_name: str
    quantity: int
    total_invested: int
    market_cap: int
    total_shares: int

    @property
    def current_price(self) -> int:
        return price_per_share(self.market_cap, self.total_shares)

    @property
    def current_value(self) -> int:
        # Same floor-per-share valuation the leaderboard uses for portfolio value
        return self.quantity * self.current_price

    @property
    def unrealized_pnl(self) -> int:
        return self.current_value - self.total_invested


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    user_id: str
    entry_type: str                  # LedgerEntryType value
    amount: int                      # cents, positive=income negative=expense
    balance_after: int               # cents, wallet_balance after op
    reference_type: str | None = None
    reference_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None
