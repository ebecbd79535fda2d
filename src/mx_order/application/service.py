"""OrderService: the purchase transaction.

purchase() is one unit of work: validate, check the trading gate, reserve
shares under the team row lock, re-price, debit cash, upsert the position and
record the order. Any failure rolls the whole unit back. PurchaseCompleted is
published only after commit.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_account.domain.repository import AccountRepositoryProtocol
from src.mx_account.infrastructure.persistence import AccountRepository
from src.mx_common.cents import cents_to_display
from src.mx_common.datetime_utils import utc_now
from src.mx_common.errors import PriceMismatchError
from src.mx_common.events import EventPublisherProtocol, PurchaseCompleted, RedisEventPublisher
from src.mx_order.application.schemas import (
    OrderListResponse,
    OrderResponse,
    PurchaseResponse,
    cursor_decode,
    cursor_encode,
)
from src.mx_order.domain.models import Order
from src.mx_order.domain.repository import OrderRepositoryProtocol
from src.mx_order.infrastructure.persistence import OrderRepository
from src.mx_risk.rules.order_limit import check_order_limit, check_quoted_price, check_team_id
from src.mx_risk.rules.trading_window import require_trading_open

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(
        self,
        order_repo: OrderRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        publisher: EventPublisherProtocol | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._publisher: EventPublisherProtocol = publisher or RedisEventPublisher()

    async def purchase(
        self,
        db: AsyncSession,
        user_id: str,
        team_id: int,
        quantity: int,
        quoted_price_cents: int,
        now: datetime | None = None,
    ) -> PurchaseResponse:
        # Rejected before touching the database
        check_team_id(team_id)
        check_order_limit(quantity)
        check_quoted_price(quoted_price_cents)

        order_id = str(uuid.uuid4())
        try:
            await require_trading_open(team_id, db, now or utc_now())

            reservation = await self._orders.reserve_shares(db, team_id, quantity)
            current_price = reservation.price_per_share
            if current_price != quoted_price_cents:
                raise PriceMismatchError(quoted_price_cents, current_price)
            amount = current_price * quantity

            account, _ = await self._accounts.debit_wallet(
                db,
                user_id,
                amount,
                ref_type="ORDER",
                ref_id=order_id,
                description=f"Buy {quantity} shares of team {team_id}",
            )
            position = await self._accounts.add_to_position(db, user_id, team_id, quantity, amount)
            order = await self._orders.insert_order(
                db,
                Order(
                    id=order_id,
                    user_id=user_id,
                    team_id=team_id,
                    quantity=quantity,
                    price_per_share=current_price,
                    amount=amount,
                    market_cap_before=reservation.market_cap,
                    market_cap_after=reservation.market_cap,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Purchase %s: user=%s team=%d qty=%d amount=%d",
            order_id,
            user_id,
            team_id,
            quantity,
            amount,
        )
        await self._publisher.publish(
            PurchaseCompleted(
                order_id=order_id,
                user_id=user_id,
                team_id=team_id,
                quantity=quantity,
                amount=amount,
                wallet_balance_after=account.wallet_balance,
            )
        )
        return PurchaseResponse(
            order=OrderResponse.from_domain(order),
            wallet_balance_cents=account.wallet_balance,
            wallet_balance_display=cents_to_display(account.wallet_balance),
            position_quantity=position.quantity,
            position_total_invested_cents=position.total_invested,
        )

    async def list_orders(
        self,
        db: AsyncSession,
        user_id: str,
        team_id: int | None,
        cursor: str | None,
        limit: int,
    ) -> OrderListResponse:
        cursor_ts, cursor_id = cursor_decode(cursor)
        orders = await self._orders.list_orders(
            db, user_id, team_id, cursor_ts, cursor_id, limit + 1
        )
        has_more = len(orders) > limit
        page = orders[:limit]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
