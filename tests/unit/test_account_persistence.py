"""AccountRepository SQL sequencing against a scripted session."""

from datetime import UTC, datetime

import pytest

from src.mx_account.infrastructure.persistence import AccountRepository
from src.mx_common.errors import InsufficientBalanceError
from tests.unit.helpers import mock_db, result_with_row, row

NOW = datetime(2026, 3, 14, 12, 0, tzinfo=UTC)


def _account_row(balance: int) -> object:
    return row(id="acc-1", user_id="user-1", wallet_balance=balance, version=3,
               created_at=NOW, updated_at=NOW)


def _ledger_row(amount: int, balance_after: int, entry_type: str, ref_type: str,
                ref_id: str) -> object:
    return row(id=11, user_id="user-1", entry_type=entry_type, amount=amount,
               balance_after=balance_after, reference_type=ref_type, reference_id=ref_id,
               description="x", created_at=NOW)


class TestCreditWallet:
    async def test_new_ref_credits_and_writes_deposit(self) -> None:
        db = mock_db(
            result_with_row(row(id=1)),
            result_with_row(_account_row(5_000)),
            result_with_row(_ledger_row(5_000, 5_000, "DEPOSIT", "WALLET_CREDIT", "pay_1")),
        )

        result = await AccountRepository().credit_wallet(db, "user-1", 5_000, "pay_1")

        assert result is not None
        account, entry = result
        assert account.wallet_balance == 5_000
        assert entry.entry_type == "DEPOSIT"
        ledger_params = db.execute.await_args_list[2].args[1]
        assert ledger_params["entry_type"] == "DEPOSIT"
        assert ledger_params["amount"] == 5_000
        assert ledger_params["reference_id"] == "pay_1"

    async def test_used_ref_touches_nothing_else(self) -> None:
        db = mock_db(result_with_row(None))
        assert await AccountRepository().credit_wallet(db, "user-1", 5_000, "pay_1") is None
        assert db.execute.await_count == 1


class TestDebitWallet:
    async def test_debit_writes_negative_purchase_entry(self) -> None:
        db = mock_db(
            result_with_row(_account_row(4_000)),
            result_with_row(_ledger_row(-1_000, 4_000, "PURCHASE", "ORDER", "ord-1")),
        )

        account, _ = await AccountRepository().debit_wallet(
            db, "user-1", 1_000, ref_type="ORDER", ref_id="ord-1", description="buy"
        )

        assert account.wallet_balance == 4_000
        ledger_params = db.execute.await_args_list[1].args[1]
        assert ledger_params["amount"] == -1_000
        assert ledger_params["entry_type"] == "PURCHASE"
        assert ledger_params["balance_after"] == 4_000

    async def test_insufficient_reports_available(self) -> None:
        db = mock_db(result_with_row(None), result_with_row(_account_row(300)))

        with pytest.raises(InsufficientBalanceError) as exc_info:
            await AccountRepository().debit_wallet(
                db, "user-1", 1_000, ref_type="ORDER", ref_id="ord-1", description="buy"
            )

        assert exc_info.value.code == 2001
        assert "available 300" in exc_info.value.message
        assert db.execute.await_count == 2

    async def test_no_account_means_zero_available(self) -> None:
        db = mock_db(result_with_row(None), result_with_row(None))
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await AccountRepository().debit_wallet(
                db, "nobody", 1, ref_type="ORDER", ref_id="o", description="buy"
            )
        assert "available 0" in exc_info.value.message
