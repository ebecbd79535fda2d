"""Pydantic response schemas for mx_market API."""

from pydantic import BaseModel

from src.mx_common.cents import cents_to_display
from src.mx_market.domain.models import Team
from src.mx_risk.rules.trading_window import TradingWindowStatus


class TeamItem(BaseModel):
    id: int
    name: str
    short_name: str | None
    market_cap_cents: int
    market_cap_display: str
    price_per_share_cents: int
    price_per_share_display: str
    total_shares: int
    available_shares: int

    @classmethod
    def from_domain(cls, team: Team) -> "TeamItem":
        price = team.price_per_share
        return cls(
            id=team.id,
            name=team.name,
            short_name=team.short_name,
            market_cap_cents=team.market_cap,
            market_cap_display=cents_to_display(team.market_cap),
            price_per_share_cents=price,
            price_per_share_display=cents_to_display(price),
            total_shares=team.total_shares,
            available_shares=team.available_shares,
        )


class TeamListResponse(BaseModel):
    items: list[TeamItem]


class TradingStatusResponse(BaseModel):
    team_id: int
    is_open: bool
    reason: str
    next_close_at: str | None
    next_kickoff_at: str | None

    @classmethod
    def from_status(cls, team_id: int, status: TradingWindowStatus) -> "TradingStatusResponse":
        return cls(
            team_id=team_id,
            is_open=status.is_open,
            reason=status.reason,
            next_close_at=status.next_close_at.isoformat() if status.next_close_at else None,
            next_kickoff_at=(
                status.next_kickoff_at.isoformat() if status.next_kickoff_at else None
            ),
        )
