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
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from config.settings import settings
from src.au_admin.api.router import router as admin_router
from src.au_bidding.api.router import router as bidding_router
from src.au_common.database import check_connection, engine
from src.au_common.errors import AppError, ValidationError
from src.au_common.redis_client import close_redis, get_redis
from src.au_common.response import error_response
from src.au_gateway.middleware.rate_limit import RateLimitMiddleware
from src.au_gateway.middleware.request_log import RequestLogMiddleware
from src.au_lot.api.router import router as lot_router
from src.au_pricing.api.router import router as pricing_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    await check_connection()
    redis = await get_redis()
    await redis.ping()
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Last added runs first: request log wraps the rate limiter so 429s are logged.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, getattr(request.state, "request_id", None))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    err = ValidationError(f"{loc}: {first.get('msg', 'invalid request')}" if loc else "Invalid request")
    resp = error_response(err.code, err.message, getattr(request.state, "request_id", None))
    return JSONResponse(
        status_code=err.http_status,
        content=resp.model_dump(),
    )


app.include_router(lot_router, prefix="/api/v1")
app.include_router(bidding_router, prefix="/api/v1")
app.include_router(pricing_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
