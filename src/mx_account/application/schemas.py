"""Pydantic schemas and cursor utilities for mx_account API."""

import base64
import json

from pydantic import BaseModel, Field

from src.mx_account.domain.models import ValuedPosition
from src.mx_common.cents import cents_to_display

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class WalletCreditRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    amount_cents: int = Field(..., gt=0, description="Amount to credit in cents")
    idempotency_ref: str = Field(
        ..., min_length=1, max_length=128, description="Payment reference; credited once"
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    user_id: str
    wallet_balance_cents: int
    wallet_balance_display: str

    @classmethod
    def from_cents(cls, user_id: str, wallet_balance: int) -> "BalanceResponse":
        return cls(
            user_id=user_id,
            wallet_balance_cents=wallet_balance,
            wallet_balance_display=cents_to_display(wallet_balance),
        )


class WalletCreditResponse(BaseModel):
    user_id: str
    credited: bool           # False when the ref was already applied
    amount_cents: int
    wallet_balance_cents: int
    wallet_balance_display: str
    ledger_entry_id: int | None


class PositionItem(BaseModel):
    team_id: int
    team_name: str
    quantity: int
    total_invested_cents: int
    current_price_cents: int
    current_value_cents: int
    current_value_display: str
    unrealized_pnl_cents: int
    unrealized_pnl_display: str

    @classmethod
    def from_domain(cls, p: ValuedPosition) -> "PositionItem":
        return cls(
            team_id=p.team_id,
            team_name=p.team_name,
            quantity=p.quantity,
            total_invested_cents=p.total_invested,
            current_price_cents=p.current_price,
            current_value_cents=p.current_value,
            current_value_display=cents_to_display(p.current_value),
            unrealized_pnl_cents=p.unrealized_pnl,
            unrealized_pnl_display=cents_to_display(p.unrealized_pnl),
        )


class PositionsResponse(BaseModel):
    items: list[PositionItem]
    portfolio_value_cents: int
    portfolio_value_display: str


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount_cents: int
    amount_display: str
    balance_after_cents: int
    balance_after_display: str
    reference_type: str | None
    reference_id: str | None
    description: str | None
    created_at: str  # ISO8601 string


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
