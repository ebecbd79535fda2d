from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_order.domain.models import Order, ShareReservation


class OrderRepositoryProtocol(Protocol):
    async def reserve_shares(
        self, db: AsyncSession, team_id: int, quantity: int
    ) -> ShareReservation: ...

    async def insert_order(self, db: AsyncSession, order: Order) -> Order: ...

    async def list_orders(
        self,
        db: AsyncSession,
        user_id: str,
        team_id: int | None,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]: ...
