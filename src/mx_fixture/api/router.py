"""mx_fixture REST endpoints (public reads).

GET /fixtures               most recent kickoff first, optional status filter
GET /fixtures/{fixture_id}  status, result, snapshot baselines
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.database import get_db_session
from src.mx_common.enums import FixtureStatus
from src.mx_common.response import ApiResponse, success_response
from src.mx_fixture.application.service import FixtureApplicationService

router = APIRouter(prefix="/fixtures", tags=["fixtures"])

_service = FixtureApplicationService()


@router.get("")
async def list_fixtures(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: FixtureStatus | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    result = await _service.list_fixtures(db, status, limit)
    return success_response(result.model_dump(), request)


@router.get("/{fixture_id}")
async def get_fixture(
    fixture_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_fixture(db, fixture_id)
    return success_response(result.model_dump(), request)
