"""Ranking of one week's accounts: pure, deterministic."""

from dataclasses import dataclass
from decimal import Decimal

from src.mx_leaderboard.domain.returns import account_value, weekly_return


@dataclass(frozen=True)
class AccountWeek:
    """One account's figures for a week, all in cents.

    `deposit_total` is the account's lifetime DEPOSIT sum read together with
    the end values; the next week's deposits are counted from it.
    """

    user_id: str
    start_wallet: int
    start_portfolio: int
    end_wallet: int
    end_portfolio: int
    deposits: int
    deposit_total: int = 0

    @property
    def start_account_value(self) -> int:
        return account_value(self.start_wallet, self.start_portfolio)

    @property
    def end_account_value(self) -> int:
        return account_value(self.end_wallet, self.end_portfolio)

    @property
    def weekly_return(self) -> Decimal:
        return weekly_return(self.start_account_value, self.end_account_value, self.deposits)


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    account: AccountWeek
    weekly_return: Decimal


def rank_accounts(accounts: list[AccountWeek]) -> list[RankedEntry]:
    """Highest return first; ties broken by user_id ascending. Ranks are 1..n, no gaps."""
    scored = [(a.weekly_return, a) for a in accounts]
    scored.sort(key=lambda pair: (-pair[0], pair[1].user_id))
    return [
        RankedEntry(rank=i, account=a, weekly_return=r)
        for i, (r, a) in enumerate(scored, start=1)
    ]
