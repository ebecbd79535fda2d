# src/mx_admin/api/router.py
"""Operator REST API. Every route requires the X-Operator-Key header.

POST /admin/tracker/run                   one tracker cycle now
POST /admin/leaderboard/build             build a week (default: the week just ended)
POST /admin/fixtures/{id}/snapshot        capture, or backfill with ?backfill=true / explicit caps
POST /admin/fixtures/{id}/settle          settle an APPLIED fixture (exactly-once)
POST /admin/wallet/credit                 idempotent wallet top-up from the payment collector
"""
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_account.application.schemas import WalletCreditRequest
from src.mx_admin.application.service import AdminService
from src.mx_clearing.application.schemas import BackfillSnapshotRequest
from src.mx_common.database import get_db_session
from src.mx_common.response import ApiResponse, success_response
from src.mx_gateway.auth.dependencies import require_operator
from src.mx_leaderboard.application.schemas import BuildWeekRequest

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_operator)])
_service = AdminService()


@router.post("/tracker/run")
async def run_tracker(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.run_tracker(db)
    return success_response(result.model_dump(), request)


@router.post("/leaderboard/build")
async def build_leaderboard(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    body: Annotated[BuildWeekRequest | None, Body()] = None,
) -> ApiResponse:
    body = body or BuildWeekRequest()
    result = await _service.build_leaderboard(db, body.week_start, body.week_end)
    return success_response(result.model_dump(), request)


@router.post("/fixtures/{fixture_id}/snapshot")
async def snapshot_fixture(
    fixture_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    backfill: bool = Query(False, description="Allow snapshotting a fixture past SCHEDULED"),
    body: Annotated[BackfillSnapshotRequest | None, Body()] = None,
) -> ApiResponse:
    body = body or BackfillSnapshotRequest()
    result = await _service.snapshot_fixture(
        db, fixture_id, body.home_cap_cents, body.away_cap_cents, backfill=backfill
    )
    return success_response(result.model_dump(), request)


@router.post("/fixtures/{fixture_id}/settle")
async def settle_fixture(
    fixture_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.settle_fixture(db, fixture_id)
    return success_response(result.model_dump(), request)


@router.post("/wallet/credit")
async def credit_wallet(
    body: WalletCreditRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.credit_wallet(
        db, body.user_id, body.amount_cents, body.idempotency_ref
    )
    return success_response(result.model_dump(), request)


async def close_service() -> None:
    await _service.aclose()
