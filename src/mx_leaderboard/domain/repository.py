from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_leaderboard.domain.models import LeaderboardEntry
from src.mx_leaderboard.domain.ranking import AccountWeek, RankedEntry


class LeaderboardRepositoryProtocol(Protocol):
    async def claim_week(
        self, db: AsyncSession, week_start: datetime, week_end: datetime
    ) -> bool: ...

    async def clear_latest(self, db: AsyncSession) -> None: ...

    async def load_account_weeks(
        self, db: AsyncSession, week_start: datetime, week_end: datetime
    ) -> list[AccountWeek]: ...

    async def insert_entries(
        self,
        db: AsyncSession,
        week_start: datetime,
        week_end: datetime,
        entries: list[RankedEntry],
    ) -> None: ...

    async def close_week_snapshots(
        self,
        db: AsyncSession,
        week_start: datetime,
        week_end: datetime,
        accounts: list[AccountWeek],
    ) -> None: ...

    async def open_snapshots_from(
        self,
        db: AsyncSession,
        week_start: datetime,
        week_end: datetime,
        accounts: list[AccountWeek],
    ) -> None: ...

    async def open_week_from_balances(
        self, db: AsyncSession, week_start: datetime, week_end: datetime
    ) -> int: ...

    async def record_entry_count(
        self, db: AsyncSession, week_start: datetime, week_end: datetime, count: int
    ) -> None: ...

    async def list_latest(self, db: AsyncSession) -> list[LeaderboardEntry]: ...

    async def list_week(self, db: AsyncSession, week_start: datetime) -> list[LeaderboardEntry]: ...
