"""LeaderboardRepository: raw SQL for week snapshots and published rows.

Portfolio value is SUM(quantity * floor(market_cap / total_shares)), the same
per-share price the purchase path charges. Everything here runs inside the
caller's transaction.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_leaderboard.domain.models import LeaderboardEntry
from src.mx_leaderboard.domain.ranking import AccountWeek, RankedEntry

_PORTFOLIO_CTE = """
    portfolio AS (
        SELECT p.user_id, SUM(p.quantity * (t.market_cap / t.total_shares)) AS value
        FROM positions p
        JOIN teams t ON t.id = p.team_id
        WHERE p.quantity > 0
        GROUP BY p.user_id
    )
"""

_DEPOSIT_TOTALS_CTE = """
    deposit_totals AS (
        SELECT user_id, SUM(amount) AS total
        FROM ledger_entries
        WHERE entry_type = 'DEPOSIT'
        GROUP BY user_id
    )
"""

# Guard row: exactly one build per (week_start, week_end)
_CLAIM_WEEK_SQL = text("""
    INSERT INTO leaderboard_weeks (week_start, week_end)
    VALUES (:week_start, :week_end)
    ON CONFLICT (week_start, week_end) DO NOTHING
    RETURNING id
""")

_RECORD_ENTRY_COUNT_SQL = text("""
    UPDATE leaderboard_weeks
    SET entry_count = :entry_count
    WHERE week_start = :week_start AND week_end = :week_end
""")

_CLEAR_LATEST_SQL = text("UPDATE weekly_leaderboard SET is_latest = FALSE WHERE is_latest")

# One statement, one snapshot: balances, portfolio and deposit totals are read
# at the same instant. Deposits for the week are the growth of the lifetime
# DEPOSIT sum since the row was opened, so cash credited after week_end but
# before the build lands in exactly one week.
_LOAD_ACCOUNT_WEEKS_SQL = text(f"""
    WITH {_PORTFOLIO_CTE}, {_DEPOSIT_TOTALS_CTE}
    SELECT a.user_id,
           COALESCE(s.start_wallet_value, 0)    AS start_wallet,
           COALESCE(s.start_portfolio_value, 0) AS start_portfolio,
           a.wallet_balance                     AS end_wallet,
           COALESCE(pf.value, 0)                AS end_portfolio,
           COALESCE(dt.total, 0)                AS deposit_total,
           COALESCE(dt.total, 0) - COALESCE(s.start_deposit_total, 0) AS deposits
    FROM accounts a
    LEFT JOIN account_week_snapshots s
           ON s.user_id = a.user_id
          AND s.week_start = :week_start
          AND s.week_end = :week_end
    LEFT JOIN portfolio pf ON pf.user_id = a.user_id
    LEFT JOIN deposit_totals dt ON dt.user_id = a.user_id
    WHERE a.created_at < :week_end
    ORDER BY a.user_id
""")

_INSERT_ENTRY_SQL = text("""
    INSERT INTO weekly_leaderboard
        (week_start, week_end, user_id, rank,
         start_wallet_value, start_portfolio_value, start_account_value,
         end_wallet_value, end_portfolio_value, end_account_value,
         deposits_during_week, weekly_return, is_latest)
    VALUES
        (:week_start, :week_end, :user_id, :rank,
         :start_wallet_value, :start_portfolio_value, :start_account_value,
         :end_wallet_value, :end_portfolio_value, :end_account_value,
         :deposits_during_week, :weekly_return, TRUE)
""")

# Mid-week joiners have no opened row; they get one here with zero start values.
_CLOSE_SNAPSHOT_SQL = text("""
    INSERT INTO account_week_snapshots
        (user_id, week_start, week_end,
         start_wallet_value, start_portfolio_value, start_account_value,
         end_wallet_value, end_portfolio_value, end_account_value,
         end_deposit_total, deposits_during_week, closed_at)
    VALUES
        (:user_id, :week_start, :week_end,
         :start_wallet_value, :start_portfolio_value, :start_account_value,
         :end_wallet_value, :end_portfolio_value, :end_account_value,
         :end_deposit_total, :deposits_during_week, NOW())
    ON CONFLICT (user_id, week_start, week_end) DO UPDATE
        SET end_wallet_value = EXCLUDED.end_wallet_value,
            end_portfolio_value = EXCLUDED.end_portfolio_value,
            end_account_value = EXCLUDED.end_account_value,
            end_deposit_total = EXCLUDED.end_deposit_total,
            deposits_during_week = EXCLUDED.deposits_during_week,
            closed_at = EXCLUDED.closed_at
""")

# Next week starts from this week's end values. Overwrites a row opened early
# from live balances, but never one that is already closed.
_OPEN_FROM_VALUES_SQL = text("""
    INSERT INTO account_week_snapshots
        (user_id, week_start, week_end,
         start_wallet_value, start_portfolio_value, start_account_value,
         start_deposit_total)
    VALUES
        (:user_id, :week_start, :week_end,
         :start_wallet_value, :start_portfolio_value, :start_account_value,
         :start_deposit_total)
    ON CONFLICT (user_id, week_start, week_end) DO UPDATE
        SET start_wallet_value = EXCLUDED.start_wallet_value,
            start_portfolio_value = EXCLUDED.start_portfolio_value,
            start_account_value = EXCLUDED.start_account_value,
            start_deposit_total = EXCLUDED.start_deposit_total
        WHERE account_week_snapshots.closed_at IS NULL
""")

# Opening mid-week (first deploy, restart) starts from the balances and deposit
# total of this instant; earlier deposits are part of the start value.
_OPEN_FROM_BALANCES_SQL = text(f"""
    WITH {_PORTFOLIO_CTE}, {_DEPOSIT_TOTALS_CTE}
    INSERT INTO account_week_snapshots
        (user_id, week_start, week_end,
         start_wallet_value, start_portfolio_value, start_account_value,
         start_deposit_total)
    SELECT a.user_id, :week_start, :week_end,
           a.wallet_balance,
           COALESCE(pf.value, 0),
           a.wallet_balance + COALESCE(pf.value, 0),
           COALESCE(dt.total, 0)
    FROM accounts a
    LEFT JOIN portfolio pf ON pf.user_id = a.user_id
    LEFT JOIN deposit_totals dt ON dt.user_id = a.user_id
    ON CONFLICT (user_id, week_start, week_end) DO NOTHING
    RETURNING user_id
""")

_ENTRY_COLUMNS = """
    week_start, week_end, user_id, rank,
    start_wallet_value, start_portfolio_value, start_account_value,
    end_wallet_value, end_portfolio_value, end_account_value,
    deposits_during_week, weekly_return, is_latest, created_at
"""

_LIST_LATEST_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM weekly_leaderboard
    WHERE is_latest
    ORDER BY rank ASC
""")

_LIST_WEEK_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM weekly_leaderboard
    WHERE week_start = :week_start
    ORDER BY rank ASC
""")


def _row_to_entry(row: Any) -> LeaderboardEntry:
    return LeaderboardEntry(
        week_start=row.week_start,
        week_end=row.week_end,
        user_id=row.user_id,
        rank=row.rank,
        start_wallet_value=row.start_wallet_value,
        start_portfolio_value=row.start_portfolio_value,
        start_account_value=row.start_account_value,
        end_wallet_value=row.end_wallet_value,
        end_portfolio_value=row.end_portfolio_value,
        end_account_value=row.end_account_value,
        deposits_during_week=row.deposits_during_week,
        weekly_return=row.weekly_return,
        is_latest=row.is_latest,
        created_at=row.created_at,
    )


class LeaderboardRepository:
    async def claim_week(
        self, db: AsyncSession, week_start: datetime, week_end: datetime
    ) -> bool:
        result = await db.execute(
            _CLAIM_WEEK_SQL, {"week_start": week_start, "week_end": week_end}
        )
        return result.fetchone() is not None

    async def clear_latest(self, db: AsyncSession) -> None:
        await db.execute(_CLEAR_LATEST_SQL)

    async def load_account_weeks(
        self, db: AsyncSession, week_start: datetime, week_end: datetime
    ) -> list[AccountWeek]:
        result = await db.execute(
            _LOAD_ACCOUNT_WEEKS_SQL, {"week_start": week_start, "week_end": week_end}
        )
        # SUM() over BIGINT comes back as NUMERIC
        return [
            AccountWeek(
                user_id=row.user_id,
                start_wallet=int(row.start_wallet),
                start_portfolio=int(row.start_portfolio),
                end_wallet=int(row.end_wallet),
                end_portfolio=int(row.end_portfolio),
                deposits=int(row.deposits),
                deposit_total=int(row.deposit_total),
            )
            for row in result.fetchall()
        ]

    async def insert_entries(
        self,
        db: AsyncSession,
        week_start: datetime,
        week_end: datetime,
        entries: list[RankedEntry],
    ) -> None:
        if not entries:
            return
        await db.execute(
            _INSERT_ENTRY_SQL,
            [
                {
                    "week_start": week_start,
                    "week_end": week_end,
                    "user_id": e.account.user_id,
                    "rank": e.rank,
                    "start_wallet_value": e.account.start_wallet,
                    "start_portfolio_value": e.account.start_portfolio,
                    "start_account_value": e.account.start_account_value,
                    "end_wallet_value": e.account.end_wallet,
                    "end_portfolio_value": e.account.end_portfolio,
                    "end_account_value": e.account.end_account_value,
                    "deposits_during_week": e.account.deposits,
                    "weekly_return": e.weekly_return,
                }
                for e in entries
            ],
        )

    async def close_week_snapshots(
        self,
        db: AsyncSession,
        week_start: datetime,
        week_end: datetime,
        accounts: list[AccountWeek],
    ) -> None:
        if not accounts:
            return
        await db.execute(
            _CLOSE_SNAPSHOT_SQL,
            [
                {
                    "user_id": a.user_id,
                    "week_start": week_start,
                    "week_end": week_end,
                    "start_wallet_value": a.start_wallet,
                    "start_portfolio_value": a.start_portfolio,
                    "start_account_value": a.start_account_value,
                    "end_wallet_value": a.end_wallet,
                    "end_portfolio_value": a.end_portfolio,
                    "end_account_value": a.end_account_value,
                    "end_deposit_total": a.deposit_total,
                    "deposits_during_week": a.deposits,
                }
                for a in accounts
            ],
        )

    async def open_snapshots_from(
        self,
        db: AsyncSession,
        week_start: datetime,
        week_end: datetime,
        accounts: list[AccountWeek],
    ) -> None:
        if not accounts:
            return
        await db.execute(
            _OPEN_FROM_VALUES_SQL,
            [
                {
                    "user_id": a.user_id,
                    "week_start": week_start,
                    "week_end": week_end,
                    "start_wallet_value": a.end_wallet,
                    "start_portfolio_value": a.end_portfolio,
                    "start_account_value": a.end_account_value,
                    "start_deposit_total": a.deposit_total,
                }
                for a in accounts
            ],
        )

    async def open_week_from_balances(
        self, db: AsyncSession, week_start: datetime, week_end: datetime
    ) -> int:
        result = await db.execute(
            _OPEN_FROM_BALANCES_SQL, {"week_start": week_start, "week_end": week_end}
        )
        return len(result.fetchall())

    async def record_entry_count(
        self, db: AsyncSession, week_start: datetime, week_end: datetime, count: int
    ) -> None:
        await db.execute(
            _RECORD_ENTRY_COUNT_SQL,
            {"week_start": week_start, "week_end": week_end, "entry_count": count},
        )

    async def list_latest(self, db: AsyncSession) -> list[LeaderboardEntry]:
        result = await db.execute(_LIST_LATEST_SQL)
        return [_row_to_entry(row) for row in result.fetchall()]

    async def list_week(self, db: AsyncSession, week_start: datetime) -> list[LeaderboardEntry]:
        result = await db.execute(_LIST_WEEK_SQL, {"week_start": week_start})
        return [_row_to_entry(row) for row in result.fetchall()]
