"""mx_market REST endpoints (public reads).

GET /teams  all teams by valuation
GET /teams/{team_id}  valuation and per-share price
GET /teams/{team_id}/trading-status  buy window as the purchase path sees it now
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.database import get_db_session
from src.mx_common.response import ApiResponse, success_response
from src.mx_market.application.service import TeamApplicationService

router = APIRouter(prefix="/teams", tags=["teams"])

_service = TeamApplicationService()


@router.get("")
async def list_teams(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_teams(db)
    return success_response(result.model_dump(), request)


@router.get("/{team_id}")
async def get_team(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    team_id: int = Path(..., gt=0),
) -> ApiResponse:
    result = await _service.get_team(db, team_id)
    return success_response(result.model_dump(), request)


@router.get("/{team_id}/trading-status")
async def get_trading_status(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    team_id: int = Path(..., gt=0),
) -> ApiResponse:
    result = await _service.get_trading_status(db, team_id)
    return success_response(result.model_dump(), request)
