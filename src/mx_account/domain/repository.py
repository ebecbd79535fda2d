"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_account.domain.models import Account, LedgerEntry, Position, ValuedPosition


class AccountRepositoryProtocol(Protocol):
    async def get_account_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> Account | None: ...

    async def credit_wallet(
        self, db: AsyncSession, user_id: str, amount: int, idempotency_ref: str
    ) -> tuple[Account, LedgerEntry] | None: ...

    async def debit_wallet(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        ref_type: str,
        ref_id: str,
        description: str,
    ) -> tuple[Account, LedgerEntry]: ...

    async def add_to_position(
        self, db: AsyncSession, user_id: str, team_id: int, quantity: int, cost: int
    ) -> Position: ...

    async def list_valued_positions(
        self, db: AsyncSession, user_id: str
    ) -> list[ValuedPosition]: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...
