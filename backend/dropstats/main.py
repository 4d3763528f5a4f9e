"""Main FastAPI application for the dropstats service."""

from contextlib import asynccontextmanager
from typing import Any, Dict

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dropstats.core import get_global_settings
from dropstats.core.database import DatabaseManager
from dropstats.core.exceptions import NotFoundError, ServiceException, ValidationError
from dropstats.core.logging import setup_logging
from dropstats.core.steam_api.client import SteamAPIClient
from dropstats.features.stats import build_stats_service, stats_router

settings = get_global_settings()
setup_logging(settings.log_level, json_logs=not settings.debug)
logger = structlog.get_logger(__name__)


def _validate_api_key_configuration() -> None:
    """Log whether vanity url resolution can work."""
    if not settings.steam_api_key:
        logger.warning(
            "STEAM_API_KEY not configured! Vanity urls will fail to resolve.",
            hint="Get a key from https://steamcommunity.com/dev/apikey",
        )
    else:
        logger.info("Steam API key configured")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting up dropstats application")
    _validate_api_key_configuration()

    db_manager = DatabaseManager(settings)
    if not await db_manager.ping():
        # Requests fail with 500 until the database is back
        logger.warning("Starting without a database connection")
    steam_client = SteamAPIClient(
        api_key=settings.steam_api_key,
        base_url=settings.steam_api_base_url,
        timeout=settings.steam_api_timeout,
    )
    await steam_client.start_session()

    app.state.db_manager = db_manager
    app.state.steam_client = steam_client
    app.state.stats_service = build_stats_service(settings, db_manager, steam_client)
    try:
        yield
    finally:
        logger.info("Shutting down dropstats application")
        await steam_client.close()
        await db_manager.close()


tags_metadata = [
    {
        "name": "stats",
        "description": "Global totals, leaderboards, player stats and player search.",
    },
    {
        "name": "health",
        "description": "Health check endpoint.",
    },
]

app = FastAPI(
    title="dropstats",
    description="Medic drop statistics aggregated from uploaded game logs.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
    debug=settings.debug,
)


def _error_response(status_code: int, exc: ServiceException) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(400, exc)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(404, exc)


@app.exception_handler(ServiceException)
async def service_error_handler(request: Request, exc: ServiceException) -> JSONResponse:
    logger.error(
        "Request failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        error_message=str(exc),
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(stats_router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health_check() -> Dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "debug": settings.debug,
    }

