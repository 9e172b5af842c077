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
from src.exchange import Exchange, build_exchange_from_settings
from src.pm_account.api.router import router as account_router
from src.pm_admin.api.router import router as admin_router
from src.pm_common.database import engine
from src.pm_common.errors import AppError
from src.pm_common.response import error_response
from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_market.api.router import router as market_router
from src.pm_settlement.api.router import router as settlement_router
from src.pm_trading.api.router import router as trading_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: configure logging; unless an exchange was injected, verify the DB
    connection and build one from settings. Shutdown: dispose the engine."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    owns_database = getattr(app.state, "exchange", None) is None
    if owns_database:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        app.state.exchange = build_exchange_from_settings(settings)
    logger.info("%s started", settings.APP_NAME)
    yield
    if owns_database:
        await engine.dispose()
    logger.info("%s stopped", settings.APP_NAME)


def create_app(exchange: Exchange | None = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.exchange = exchange

    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        resp = error_response(exc, request)
        return JSONResponse(
            status_code=exc.http_status,
            content=resp.model_dump(),
        )

    app.include_router(market_router, prefix="/api/v1")
    app.include_router(trading_router, prefix="/api/v1")
    app.include_router(settlement_router, prefix="/api/v1")
    app.include_router(account_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": "0.1.0"}

    return app


app = create_app()
