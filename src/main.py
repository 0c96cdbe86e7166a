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
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from src.us_card.api.router import router as card_router
from src.us_common.database import engine
from src.us_common.errors import AppError
from src.us_common.logging_config import setup_logging
from src.us_common.redis_client import close_redis, ping_redis
from src.us_common.response import error_content, error_response, field_error_messages
from src.us_gateway.middleware.request_log import RequestLogMiddleware
from src.us_user.api.router import router as user_router

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await ping_redis()
    logger.info("%s started", settings.APP_NAME)
    yield
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
    resp = error_response(exc.http_status, exc.message, request.url.path, exc.errors)
    headers = {"WWW-Authenticate": "Bearer"} if exc.http_status == 401 else None
    return JSONResponse(
        status_code=exc.http_status,
        content=error_content(resp),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    resp = error_response(
        400, "Validation error", request.url.path, field_error_messages(exc.errors())
    )
    return JSONResponse(status_code=400, content=error_content(resp))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    resp = error_response(exc.status_code, str(exc.detail), request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content(resp),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Storage / cache failures land here; no internal detail leaves the process
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    resp = error_response(500, "Internal server error", request.url.path)
    return JSONResponse(status_code=500, content=error_content(resp))


app.include_router(user_router, prefix="/api")
app.include_router(card_router, prefix="/api")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
