# src/mx_order/application/schemas.py
import base64
import json
from datetime import datetime

from pydantic import BaseModel, Field

from src.mx_common.cents import cents_to_display
from src.mx_order.domain.models import Order


def cursor_encode(last_order: Order) -> str:
    """Encode composite cursor (created_at, id) from the last order in a page."""
    payload = {
        "ts": last_order.created_at.isoformat() if last_order.created_at else None,
        "id": last_order.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[datetime | None, str | None]:
    """Decode composite cursor -> (created_at, order_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(data["ts"]), str(data["id"])
    except (ValueError, KeyError, TypeError):
        return None, None


class PurchaseRequest(BaseModel):
    # Range checks live in the service so every caller gets the same errors
    team_id: int
    quantity: int
    quoted_price_cents: int = Field(..., description="Per-share price the client displayed")


class OrderResponse(BaseModel):
    id: str
    team_id: int
    direction: str
    quantity: int
    price_per_share_cents: int
    amount_cents: int
    amount_display: str
    market_cap_before_cents: int
    market_cap_after_cents: int
    created_at: str | None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            team_id=order.team_id,
            direction=order.direction.value,
            quantity=order.quantity,
            price_per_share_cents=order.price_per_share,
            amount_cents=order.amount,
            amount_display=cents_to_display(order.amount),
            market_cap_before_cents=order.market_cap_before,
            market_cap_after_cents=order.market_cap_after,
            created_at=order.created_at.isoformat() if order.created_at else None,
        )


class PurchaseResponse(BaseModel):
    order: OrderResponse
    wallet_balance_cents: int
    wallet_balance_display: str
    position_quantity: int
    position_total_invested_cents: int


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool
