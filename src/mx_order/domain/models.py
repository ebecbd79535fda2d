"""Order domain model: pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime

from src.mx_common.cents import price_per_share
from src.mx_common.enums import OrderDirection


@dataclass
class Order:
    id: str
    user_id: str
    team_id: int
    quantity: int
    price_per_share: int       # cents, floor(market_cap / total_shares) at execution
    amount: int                # cents, price_per_share * quantity
    market_cap_before: int     # cents, audit only
    market_cap_after: int      # cents, equal to before: purchases never move valuation
    direction: OrderDirection = OrderDirection.BUY
    created_at: datetime | None = None


@dataclass(frozen=True)
class ShareReservation:
    """Team valuation read while reserving shares (row locked until commit)."""

    team_id: int
    market_cap: int
    total_shares: int
    available_shares_after: int

    @property
    def price_per_share(self) -> int:
        return price_per_share(self.market_cap, self.total_shares)
