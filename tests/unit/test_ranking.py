from decimal import Decimal

from src.mx_leaderboard.domain.ranking import AccountWeek, rank_accounts


def _week(user_id: str, start: int, end: int, deposits: int = 0) -> AccountWeek:
    return AccountWeek(
        user_id=user_id,
        start_wallet=start,
        start_portfolio=0,
        end_wallet=end,
        end_portfolio=0,
        deposits=deposits,
    )


class TestRankAccounts:
    def test_highest_return_first(self) -> None:
        ranked = rank_accounts([_week("a", 100, 90), _week("b", 100, 120), _week("c", 100, 100)])
        assert [e.account.user_id for e in ranked] == ["b", "c", "a"]
        assert [e.rank for e in ranked] == [1, 2, 3]
        assert ranked[0].weekly_return == Decimal("0.2")

    def test_ties_broken_by_user_id(self) -> None:
        ranked = rank_accounts([_week("zed", 100, 110), _week("amy", 200, 220), _week("kim", 0, 0)])
        assert [e.account.user_id for e in ranked] == ["amy", "zed", "kim"]

    def test_zero_start_accounts_rank_at_zero(self) -> None:
        ranked = rank_accounts([_week("new", 0, 5000, deposits=5000), _week("old", 100, 99)])
        assert [e.account.user_id for e in ranked] == ["new", "old"]
        assert ranked[0].weekly_return == 0

    def test_portfolio_counts_toward_account_value(self) -> None:
        w = AccountWeek("u", start_wallet=60, start_portfolio=40, end_wallet=10,
                        end_portfolio=100, deposits=0)
        assert w.start_account_value == 100
        assert w.end_account_value == 110
        assert w.weekly_return == Decimal("0.1")

    def test_input_order_does_not_matter(self) -> None:
        weeks = [_week("a", 100, 105), _week("b", 100, 105), _week("c", 100, 130)]
        forward = [(e.rank, e.account.user_id) for e in rank_accounts(weeks)]
        backward = [(e.rank, e.account.user_id) for e in rank_accounts(list(reversed(weeks)))]
        assert forward == backward

    def test_empty(self) -> None:
        assert rank_accounts([]) == []
