"""AccountApplicationService: thin composition layer.

credit_wallet commits its own transaction and publishes WalletCredited after
commit. Read operations run without an explicit transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_account.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
    PositionItem,
    PositionsResponse,
    WalletCreditResponse,
    cursor_decode,
    cursor_encode,
)
from src.mx_account.domain.repository import AccountRepositoryProtocol
from src.mx_account.infrastructure.persistence import AccountRepository
from src.mx_common.cents import cents_to_display
from src.mx_common.errors import AccountNotFoundError, InvalidAmountError
from src.mx_common.events import EventPublisherProtocol, RedisEventPublisher, WalletCredited

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def __init__(
        self,
        repo: AccountRepositoryProtocol | None = None,
        publisher: EventPublisherProtocol | None = None,
    ) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()
        self._publisher: EventPublisherProtocol = publisher or RedisEventPublisher()

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        account = await self._repo.get_account_by_user_id(db, user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        return BalanceResponse.from_cents(user_id=user_id, wallet_balance=account.wallet_balance)

    async def credit_wallet(
        self, db: AsyncSession, user_id: str, amount_cents: int, idempotency_ref: str
    ) -> WalletCreditResponse:
        """Idempotent top-up: a replayed idempotency_ref reports credited=False."""
        if amount_cents <= 0:
            raise InvalidAmountError(amount_cents)
        try:
            credited = await self._repo.credit_wallet(db, user_id, amount_cents, idempotency_ref)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if credited is None:
            logger.info("Wallet credit %s already applied; skipping", idempotency_ref)
            account = await self._repo.get_account_by_user_id(db, user_id)
            return WalletCreditResponse(
                user_id=user_id,
                credited=False,
                amount_cents=amount_cents,
                wallet_balance_cents=account.wallet_balance if account else 0,
                wallet_balance_display=cents_to_display(account.wallet_balance if account else 0),
                ledger_entry_id=None,
            )

        account, entry = credited
        await self._publisher.publish(
            WalletCredited(
                user_id=user_id,
                amount=amount_cents,
                idempotency_ref=idempotency_ref,
                wallet_balance_after=account.wallet_balance,
            )
        )
        return WalletCreditResponse(
            user_id=user_id,
            credited=True,
            amount_cents=amount_cents,
            wallet_balance_cents=account.wallet_balance,
            wallet_balance_display=cents_to_display(account.wallet_balance),
            ledger_entry_id=entry.id,
        )

    async def list_positions(self, db: AsyncSession, user_id: str) -> PositionsResponse:
        positions = await self._repo.list_valued_positions(db, user_id)
        total = sum(p.current_value for p in positions)
        return PositionsResponse(
            items=[PositionItem.from_domain(p) for p in positions],
            portfolio_value_cents=total,
            portfolio_value_display=cents_to_display(total),
        )

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, user_id, cursor_id, limit + 1, entry_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [
            LedgerEntryItem(
                id=e.id,
                entry_type=e.entry_type,
                amount_cents=e.amount,
                amount_display=cents_to_display(e.amount),
                balance_after_cents=e.balance_after,
                balance_after_display=cents_to_display(e.balance_after),
                reference_type=e.reference_type,
                reference_id=e.reference_id,
                description=e.description,
                created_at=e.created_at.isoformat() if e.created_at else "",
            )
            for e in page
        ]

        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)
