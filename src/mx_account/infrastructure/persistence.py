"""AccountRepository: concrete implementation of AccountRepositoryProtocol.

All balance-mutating operations use atomic PostgreSQL UPDATE ... RETURNING.
A result of 0 rows means a business constraint was violated (insufficient funds).

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_account.domain.models import Account, LedgerEntry, Position, ValuedPosition
from src.mx_common.enums import LedgerEntryType
from src.mx_common.errors import InsufficientBalanceError, InternalError

_ACCOUNT_COLUMNS = "id, user_id, wallet_balance, version, created_at, updated_at"

# ---------------------------------------------------------------------------
# SQL: wallet mutations
# ---------------------------------------------------------------------------

# Guard row: a replayed ref conflicts and returns nothing.
_CLAIM_CREDIT_REF_SQL = text("""
    INSERT INTO wallet_credits (idempotency_ref, user_id, amount)
    VALUES (:idempotency_ref, :user_id, :amount)
    ON CONFLICT (idempotency_ref) DO NOTHING
    RETURNING id
""")

_CREDIT_ACCOUNT_SQL = text(f"""
    INSERT INTO accounts (user_id, wallet_balance)
    VALUES (:user_id, :amount)
    ON CONFLICT (user_id) DO UPDATE
        SET wallet_balance = accounts.wallet_balance + EXCLUDED.wallet_balance,
            version = accounts.version + 1,
            updated_at = NOW()
    RETURNING {_ACCOUNT_COLUMNS}
""")

_DEBIT_ACCOUNT_SQL = text(f"""
    UPDATE accounts
    SET wallet_balance = wallet_balance - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id AND wallet_balance >= :amount
    RETURNING {_ACCOUNT_COLUMNS}
""")

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (user_id, entry_type, amount, balance_after,
         reference_type, reference_id, description)
    VALUES
        (:user_id, :entry_type, :amount, :balance_after,
         :reference_type, :reference_id, :description)
    RETURNING id, user_id, entry_type, amount, balance_after,
              reference_type, reference_id, description, created_at
""")

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
""")

# ---------------------------------------------------------------------------
# SQL: positions
# ---------------------------------------------------------------------------

_ADD_TO_POSITION_SQL = text("""
    INSERT INTO positions (user_id, team_id, quantity, total_invested)
    VALUES (:user_id, :team_id, :quantity, :cost)
    ON CONFLICT (user_id, team_id) DO UPDATE
        SET quantity = positions.quantity + EXCLUDED.quantity,
            total_invested = positions.total_invested + EXCLUDED.total_invested,
            updated_at = NOW()
    RETURNING user_id, team_id, quantity, total_invested, created_at, updated_at
""")

_LIST_VALUED_POSITIONS_SQL = text("""
    SELECT p.team_id, t.name AS team_name, p.quantity, p.total_invested,
           t.market_cap, t.total_shares
    FROM positions p
    JOIN teams t ON t.id = p.team_id
    WHERE p.user_id = :user_id AND p.quantity > 0
    ORDER BY p.team_id
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, user_id, entry_type, amount, balance_after,
           reference_type, reference_id, description, created_at
    FROM ledger_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = :entry_type)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_account(row: Any) -> Account:
    return Account(
        id=str(row.id),
        user_id=row.user_id,
        wallet_balance=row.wallet_balance,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_ledger(row: Any) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        user_id=row.user_id,
        entry_type=row.entry_type,
        amount=row.amount,
        balance_after=row.balance_after,
        reference_type=row.reference_type,
        reference_id=row.reference_id,
        description=row.description,
        created_at=row.created_at,
    )


class AccountRepository:
    """Concrete repository: all operations atomic at the SQL level."""

    async def get_account_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> Account | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def credit_wallet(
        self, db: AsyncSession, user_id: str, amount: int, idempotency_ref: str
    ) -> tuple[Account, LedgerEntry] | None:
        """Credit once per idempotency_ref. Returns None when the ref was already used."""
        claimed = await db.execute(
            _CLAIM_CREDIT_REF_SQL,
            {"idempotency_ref": idempotency_ref, "user_id": user_id, "amount": amount},
        )
        if claimed.fetchone() is None:
            return None

        result = await db.execute(_CREDIT_ACCOUNT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise InternalError("Account upsert returned no rows")
        account = _row_to_account(row)
        entry = await self._write_ledger(
            db,
            user_id=user_id,
            entry_type=LedgerEntryType.DEPOSIT,
            amount=amount,
            balance_after=account.wallet_balance,
            reference_type="WALLET_CREDIT",
            reference_id=idempotency_ref,
            description="Wallet top-up",
        )
        return account, entry

    async def debit_wallet(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        ref_type: str,
        ref_id: str,
        description: str,
    ) -> tuple[Account, LedgerEntry]:
        result = await db.execute(_DEBIT_ACCOUNT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            acc_result = await db.execute(_GET_ACCOUNT_SQL, {"user_id": user_id})
            acc_row = acc_result.fetchone()
            available = acc_row.wallet_balance if acc_row else 0
            raise InsufficientBalanceError(amount, available)
        account = _row_to_account(row)
        entry = await self._write_ledger(
            db,
            user_id=user_id,
            entry_type=LedgerEntryType.PURCHASE,
            amount=-amount,
            balance_after=account.wallet_balance,
            reference_type=ref_type,
            reference_id=ref_id,
            description=description,
        )
        return account, entry

    async def add_to_position(
        self, db: AsyncSession, user_id: str, team_id: int, quantity: int, cost: int
    ) -> Position:
        result = await db.execute(
            _ADD_TO_POSITION_SQL,
            {"user_id": user_id, "team_id": team_id, "quantity": quantity, "cost": cost},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Position upsert returned no rows")
        return Position(
            user_id=row.user_id,
            team_id=row.team_id,
            quantity=row.quantity,
            total_invested=row.total_invested,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    async def list_valued_positions(
        self, db: AsyncSession, user_id: str
    ) -> list[ValuedPosition]:
        result = await db.execute(_LIST_VALUED_POSITIONS_SQL, {"user_id": user_id})
        return [
            ValuedPosition(
                team_id=row.team_id,
                team_name=row.team_name,
                quantity=row.quantity,
                total_invested=row.total_invested,
                market_cap=row.market_cap,
                total_shares=row.total_shares,
            )
            for row in result.fetchall()
        ]

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "limit": limit,
                "entry_type": entry_type,
            },
        )
        return [_row_to_ledger(row) for row in result.fetchall()]

    async def _write_ledger(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        entry_type: LedgerEntryType,
        amount: int,
        balance_after: int,
        reference_type: str,
        reference_id: str,
        description: str,
    ) -> LedgerEntry:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "user_id": user_id,
                "entry_type": entry_type.value,
                "amount": amount,
                "balance_after": balance_after,
                "reference_type": reference_type,
                "reference_id": reference_id,
                "description": description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_ledger(row)
