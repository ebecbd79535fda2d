# src/mx_order/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.mx_common.database import get_db_session
from src.mx_gateway.auth.dependencies import get_current_user
from src.mx_gateway.user.db_models import UserModel
from src.mx_order.application.schemas import OrderListResponse, PurchaseRequest, PurchaseResponse
from src.mx_order.application.service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderService()


@router.post("/purchase", response_model=PurchaseResponse, status_code=201)
async def purchase(
    req: PurchaseRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> PurchaseResponse:
    return await _service.purchase(
        db, str(current_user.id), req.team_id, req.quantity, req.quoted_price_cents
    )


@router.get("", response_model=OrderListResponse)
async def list_orders(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    team_id: int | None = Query(None, description="Filter by team"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
) -> OrderListResponse:
    return await _service.list_orders(db, str(current_user.id), team_id, cursor, limit)
