"""FixtureApplicationService: read-only fixture queries."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.enums import FixtureStatus
from src.mx_common.errors import FixtureNotFoundError
from src.mx_fixture.application.schemas import FixtureItem, FixtureListResponse
from src.mx_fixture.domain.repository import FixtureRepositoryProtocol
from src.mx_fixture.infrastructure.persistence import FixtureRepository


class FixtureApplicationService:
    def __init__(self, repo: FixtureRepositoryProtocol | None = None) -> None:
        self._repo: FixtureRepositoryProtocol = repo or FixtureRepository()

    async def list_fixtures(
        self, db: AsyncSession, status: FixtureStatus | None, limit: int
    ) -> FixtureListResponse:
        fixtures = await self._repo.list_fixtures(db, status, limit)
        return FixtureListResponse(items=[FixtureItem.from_domain(f) for f in fixtures])

    async def get_fixture(self, db: AsyncSession, fixture_id: str) -> FixtureItem:
        fixture = await self._repo.get_fixture(db, fixture_id)
        if fixture is None:
            raise FixtureNotFoundError(fixture_id)
        return FixtureItem.from_domain(fixture)
