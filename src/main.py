"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.mx_account.api.router import router as account_router
from src.mx_admin.api.router import close_service as close_admin_service
from src.mx_admin.api.router import router as admin_router
from src.mx_admin.scheduler import close_jobs, open_current_week, start_scheduler, stop_scheduler
from src.mx_common.database import engine
from src.mx_common.errors import AppError
from src.mx_common.redis_client import close_redis
from src.mx_common.response import error_response
from src.mx_fixture.api.router import router as fixture_router
from src.mx_gateway.middleware.request_log import RequestLogMiddleware
from src.mx_leaderboard.api.router import router as leaderboard_router
from src.mx_market.api.router import router as team_router
from src.mx_order.api.router import router as order_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the DB, start background jobs. Shutdown: stop and close.

    Feed clients held by the tracker instances are closed before the DB pool.
    Redis is connected lazily on first publish; core flows never wait on it.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.SCHEDULER_ENABLED:
        await open_current_week()
        start_scheduler()
    yield
    stop_scheduler()
    await close_jobs()
    await close_admin_service()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(team_router, prefix="/api/v1")
app.include_router(fixture_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(order_router, prefix="/api/v1")
app.include_router(leaderboard_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
