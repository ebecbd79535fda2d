"""Repository Protocol for fixtures."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.enums import FixtureStatus
from src.mx_fixture.domain.models import FeedMatch, Fixture, FixtureUpdate


class FixtureRepositoryProtocol(Protocol):
    async def get_fixture(self, db: AsyncSession, fixture_id: str) -> Fixture | None: ...

    async def list_tracking_window(
        self, db: AsyncSession, since: datetime, until: datetime, settle_since: datetime
    ) -> list[Fixture]: ...

    async def apply_update(
        self,
        db: AsyncSession,
        fixture_id: str,
        expected_status: FixtureStatus,
        update: FixtureUpdate,
    ) -> bool: ...

    async def list_fixtures(
        self, db: AsyncSession, status: FixtureStatus | None, limit: int
    ) -> list[Fixture]: ...


class MatchFeedProtocol(Protocol):
    async def get_match(self, external_id: int) -> FeedMatch: ...

    async def aclose(self) -> None: ...