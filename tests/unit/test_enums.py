"""Tests for mx_common.enums: values must match DB CHECK constraints."""

from src.mx_common.enums import (
    FeedStatus,
    FixtureStatus,
    LedgerEntryType,
    MatchResult,
    OrderDirection,
    SettlementStatus,
)


class TestAllEnumsAreStr:
    def test_fixture_status_is_str(self) -> None:
        assert isinstance(FixtureStatus.SCHEDULED, str)
        assert FixtureStatus.SCHEDULED == "SCHEDULED"

    def test_match_result_is_str(self) -> None:
        assert MatchResult.DRAW == "DRAW"


class TestCheckConstraintValues:
    def test_fixture_status(self) -> None:
        assert {s.value for s in FixtureStatus} == {"SCHEDULED", "CLOSED", "APPLIED", "POSTPONED"}

    def test_match_result(self) -> None:
        assert {r.value for r in MatchResult} == {"PENDING", "HOME_WIN", "AWAY_WIN", "DRAW"}

    def test_ledger_entry_type(self) -> None:
        assert {t.value for t in LedgerEntryType} == {"DEPOSIT", "PURCHASE"}

    def test_order_direction_is_buy_only(self) -> None:
        assert [d.value for d in OrderDirection] == ["BUY"]


class TestFeedStatus:
    def test_finished_and_live_states_present(self) -> None:
        values = {s.value for s in FeedStatus}
        assert {"FINISHED", "IN_PLAY", "PAUSED", "POSTPONED"} <= values

    def test_settlement_outcomes(self) -> None:
        assert SettlementStatus.SETTLED.value == "SETTLED"
