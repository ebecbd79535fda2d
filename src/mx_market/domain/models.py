"""Domain models for mx_market: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.mx_common.cents import price_per_share


@dataclass
class Team:
    id: int                   # football-data.org team id
    name: str
    short_name: str | None
    market_cap: int           # cents; changes only through settlement
    total_shares: int         # constant, > 0
    available_shares: int     # 0 <= available_shares <= total_shares
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def price_per_share(self) -> int:
        return price_per_share(self.market_cap, self.total_shares)

    @property
    def shares_outstanding(self) -> int:
        return self.total_shares - self.available_shares
