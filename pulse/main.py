"""FastAPI application entry point for Psychosocial Pulse.

This module initializes the FastAPI application, sets up logging,
seeds the demo history, registers routers, and handles global exception
handling.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pulse.config import get_settings
from pulse.logging_config import setup_logging, get_logger
from pulse.routes import health, sessions, surveys, users
from pulse.services.result_repository import get_result_repository
from pulse.services.seed import seed_demo_history

logger = get_logger(__name__)

SERVICE_NAME = "Psychosocial Pulse"
SERVICE_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup:
    - Configure logging
    - Seed demo history for the demo user (when enabled)

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    settings = get_settings()
    setup_logging()

    logger.info(
        f"{SERVICE_NAME} starting - "
        f"Environment: {settings.environment}, "
        f"Log Level: {settings.log_level}, "
        f"Result store: {settings.result_store}, "
        f"AI: {'configured' if settings.ai_configured else 'not configured'}"
    )

    if settings.seed_demo_data:
        seed_demo_history(get_result_repository(), settings.demo_user_id)

    yield

    logger.info(f"{SERVICE_NAME} shutting down")


app = FastAPI(
    title=SERVICE_NAME,
    description="Psychosocial risk surveys, burnout scoring and wellbeing dashboards",
    version=SERVICE_VERSION,
    lifespan=lifespan
)


@app.get("/")
async def root() -> dict:
    """Root endpoint with basic API information."""
    settings = get_settings()
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": settings.environment,
        "status": "operational"
    }


app.include_router(health.router, tags=["Health"])
app.include_router(surveys.router, tags=["Surveys"])
app.include_router(sessions.router, tags=["Sessions"])
app.include_router(users.router, tags=["Users"])


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled exceptions and return a generic 500 without internals."""
    logger.error(
        f"Unhandled exception for {request.method} {request.url}: {exc}",
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later."
        }
    )
