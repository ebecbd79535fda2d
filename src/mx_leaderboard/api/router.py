"""mx_leaderboard REST endpoints (public reads).

GET /leaderboard/latest                 most recently published week
GET /leaderboard?week_start=<ISO8601>   a specific published week
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.database import get_db_session
from src.mx_common.response import ApiResponse, success_response
from src.mx_leaderboard.application.service import LeaderboardService

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])

_service = LeaderboardService()


@router.get("/latest")
async def get_latest(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_latest(db)
    return success_response(result.model_dump(), request)


@router.get("")
async def get_week(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    week_start: datetime = Query(..., description="Week start (UTC instant, ISO8601)"),
) -> ApiResponse:
    result = await _service.get_week(db, week_start)
    return success_response(result.model_dump(), request)
