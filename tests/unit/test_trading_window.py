"""Trading gate: open/closed decisions around buy close and live matches."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from src.mx_common.errors import WindowClosedError
from src.mx_risk.rules.trading_window import (
    REASON_LOOKUP_FAILED,
    REASON_MATCH_IN_PROGRESS,
    REASON_NO_UPCOMING,
    REASON_OPEN_UNTIL_CLOSE,
    REASON_PENDING_KICKOFF,
    check_trading_window,
    require_trading_open,
)
from tests.unit.helpers import mock_db, result_with_row, row

KICKOFF = datetime(2026, 3, 14, 15, 0, tzinfo=UTC)
BUY_CLOSE = KICKOFF - timedelta(minutes=30)


def _upcoming() -> object:
    return row(kickoff_at=KICKOFF, buy_close_at=BUY_CLOSE)


class TestCheckTradingWindow:
    async def test_open_forty_minutes_before_kickoff(self) -> None:
        db = mock_db(result_with_row(None), result_with_row(_upcoming()))
        status = await check_trading_window(1, db, KICKOFF - timedelta(minutes=40))
        assert status.is_open is True
        assert status.reason == REASON_OPEN_UNTIL_CLOSE
        assert status.next_close_at == BUY_CLOSE
        assert status.next_kickoff_at == KICKOFF

    async def test_closed_twenty_minutes_before_kickoff(self) -> None:
        db = mock_db(result_with_row(None), result_with_row(_upcoming()))
        status = await check_trading_window(1, db, KICKOFF - timedelta(minutes=20))
        assert status.is_open is False
        assert status.reason == REASON_PENDING_KICKOFF

    async def test_closed_exactly_at_buy_close(self) -> None:
        db = mock_db(result_with_row(None), result_with_row(_upcoming()))
        status = await check_trading_window(1, db, BUY_CLOSE)
        assert status.is_open is False

    async def test_closed_while_match_live(self) -> None:
        db = mock_db(result_with_row(row(kickoff_at=KICKOFF)))
        status = await check_trading_window(1, db, KICKOFF + timedelta(minutes=45))
        assert status.is_open is False
        assert status.reason == REASON_MATCH_IN_PROGRESS
        # Upcoming lookup skipped once a live fixture is found
        assert db.execute.await_count == 1

    async def test_open_when_no_upcoming_fixture(self) -> None:
        db = mock_db(result_with_row(None), result_with_row(None))
        status = await check_trading_window(1, db, KICKOFF)
        assert status.is_open is True
        assert status.reason == REASON_NO_UPCOMING

    async def test_lookup_failure_closes_window(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        status = await check_trading_window(1, db, KICKOFF - timedelta(hours=3))
        assert status.is_open is False
        assert status.reason == REASON_LOOKUP_FAILED


class TestRequireTradingOpen:
    async def test_open_passes(self) -> None:
        db = mock_db(result_with_row(None), result_with_row(None))
        await require_trading_open(1, db, KICKOFF)

    async def test_closed_raises_4010(self) -> None:
        db = mock_db(result_with_row(None), result_with_row(_upcoming()))
        with pytest.raises(WindowClosedError) as exc_info:
            await require_trading_open(7, db, KICKOFF - timedelta(minutes=5))
        assert exc_info.value.code == 4010
        assert "team 7" in exc_info.value.message
