"""Trading gate: is the buy window for a team open right now?

Evaluated fresh on every call, never cached. Any failure to read fixtures
closes the window.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mx_common.errors import WindowClosedError

logger = logging.getLogger(__name__)

REASON_MATCH_IN_PROGRESS = "match in progress"
REASON_PENDING_KICKOFF = "window closed pending kickoff"
REASON_OPEN_UNTIL_CLOSE = "open until buy close"
REASON_NO_UPCOMING = "no upcoming fixture"
REASON_LOOKUP_FAILED = "unable to determine trading status"

_LIVE_FIXTURE_SQL = text("""
    SELECT kickoff_at
    FROM fixtures
    WHERE (home_team_id = :team_id OR away_team_id = :team_id)
      AND status = 'CLOSED'
      AND kickoff_at <= :now
      AND kickoff_at >= :live_since
    ORDER BY kickoff_at DESC
    LIMIT 1
""")

_NEXT_SCHEDULED_SQL = text("""
    SELECT kickoff_at, buy_close_at
    FROM fixtures
    WHERE (home_team_id = :team_id OR away_team_id = :team_id)
      AND status = 'SCHEDULED'
      AND kickoff_at >= :now
    ORDER BY kickoff_at ASC
    LIMIT 1
""")


@dataclass(frozen=True)
class TradingWindowStatus:
    is_open: bool
    reason: str
    next_close_at: datetime | None = None
    next_kickoff_at: datetime | None = None


async def check_trading_window(
    team_id: int, db: AsyncSession, now: datetime
) -> TradingWindowStatus:
    """Closed while a CLOSED fixture of the team is within its match duration,
    or once the earliest upcoming SCHEDULED fixture has passed buy close.
    Open otherwise, including when the team has no upcoming fixture.
    """
    live_since = now - timedelta(minutes=settings.MATCH_DURATION_MINUTES)
    try:
        live = (
            await db.execute(
                _LIVE_FIXTURE_SQL,
                {"team_id": team_id, "now": now, "live_since": live_since},
            )
        ).fetchone()
        if live is not None:
            return TradingWindowStatus(
                is_open=False,
                reason=REASON_MATCH_IN_PROGRESS,
                next_kickoff_at=live.kickoff_at,
            )

        upcoming = (
            await db.execute(_NEXT_SCHEDULED_SQL, {"team_id": team_id, "now": now})
        ).fetchone()
    except SQLAlchemyError:
        logger.exception("Trading window lookup failed for team %s", team_id)
        return TradingWindowStatus(is_open=False, reason=REASON_LOOKUP_FAILED)

    if upcoming is None:
        return TradingWindowStatus(is_open=True, reason=REASON_NO_UPCOMING)

    if now >= upcoming.buy_close_at:
        return TradingWindowStatus(
            is_open=False,
            reason=REASON_PENDING_KICKOFF,
            next_close_at=upcoming.buy_close_at,
            next_kickoff_at=upcoming.kickoff_at,
        )
    return TradingWindowStatus(
        is_open=True,
        reason=REASON_OPEN_UNTIL_CLOSE,
        next_close_at=upcoming.buy_close_at,
        next_kickoff_at=upcoming.kickoff_at,
    )


async def require_trading_open(team_id: int, db: AsyncSession, now: datetime) -> None:
    """Raise WindowClosedError(4010) unless the team's buy window is open."""
    status = await check_trading_window(team_id, db, now)
    if not status.is_open:
        raise WindowClosedError(team_id, status.reason)
