"""OrderRepository: share reservation and order records.

reserve_shares takes the team row lock (UPDATE ... RETURNING) that serializes
concurrent purchases of one team and contends with settlement's valuation
update, so the valuation it returns cannot move before commit.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.enums import OrderDirection
from src.mx_common.errors import InsufficientSharesError, InternalError, TeamNotFoundError
from src.mx_order.domain.models import Order, ShareReservation

_RESERVE_SHARES_SQL = text("""
    UPDATE teams
    SET available_shares = available_shares - :quantity,
        updated_at = NOW()
    WHERE id = :team_id AND available_shares >= :quantity
    RETURNING id, market_cap, total_shares, available_shares
""")

_TEAM_EXISTS_SQL = text("SELECT id FROM teams WHERE id = :team_id")

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders
        (id, user_id, team_id, direction, quantity, price_per_share, amount,
         market_cap_before, market_cap_after)
    VALUES
        (:id, :user_id, :team_id, :direction, :quantity, :price_per_share, :amount,
         :market_cap_before, :market_cap_after)
    RETURNING created_at
""")

_LIST_ORDERS_SQL = text("""
    SELECT id, user_id, team_id, direction, quantity, price_per_share, amount,
           market_cap_before, market_cap_after, created_at
    FROM orders
    WHERE user_id = :user_id
      AND (CAST(:team_id AS INTEGER) IS NULL OR team_id = :team_id)
      AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
      )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")


def _row_to_order(row: Any) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        team_id=row.team_id,
        direction=OrderDirection(row.direction),
        quantity=row.quantity,
        price_per_share=row.price_per_share,
        amount=row.amount,
        market_cap_before=row.market_cap_before,
        market_cap_after=row.market_cap_after,
        created_at=row.created_at,
    )


class OrderRepository:
    async def reserve_shares(
        self, db: AsyncSession, team_id: int, quantity: int
    ) -> ShareReservation:
        result = await db.execute(_RESERVE_SHARES_SQL, {"team_id": team_id, "quantity": quantity})
        row = result.fetchone()
        if row is None:
            exists = (await db.execute(_TEAM_EXISTS_SQL, {"team_id": team_id})).fetchone()
            if exists is None:
                raise TeamNotFoundError(team_id)
            raise InsufficientSharesError(team_id, quantity)
        return ShareReservation(
            team_id=row.id,
            market_cap=row.market_cap,
            total_shares=row.total_shares,
            available_shares_after=row.available_shares,
        )

    async def insert_order(self, db: AsyncSession, order: Order) -> Order:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "user_id": order.user_id,
                "team_id": order.team_id,
                "direction": order.direction.value,
                "quantity": order.quantity,
                "price_per_share": order.price_per_share,
                "amount": order.amount,
                "market_cap_before": order.market_cap_before,
                "market_cap_after": order.market_cap_after,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Order insert returned no rows")
        order.created_at = row.created_at
        return order

    async def list_orders(
        self,
        db: AsyncSession,
        user_id: str,
        team_id: int | None,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {
                "user_id": user_id,
                "team_id": team_id,
                "cursor_ts": cursor_ts,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_order(row) for row in result.fetchall()]
