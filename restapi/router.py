"""Application configuration and router setup."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import fastapi
from fastapi.middleware import cors
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from components.core import init_db
from components.core.config import get_settings
from components.core.exceptions import CleaningTrackerError, NotAuthenticatedError
from components.core.logging_config import setup_logging
from components.preferences.context import AppContext
from restapi.endpoints import (
    auth,
    clients,
    dashboard,
    health_check,
    preferences,
    reports,
    work_days,
    workers,
)

logger = logging.getLogger(__name__)


def create_app(preferences_path: Optional[str] = None) -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging()

    app_context = AppContext.load(preferences_path or settings.PREFERENCES_FILE)

    @asynccontextmanager
    async def lifespan(app: fastapi.FastAPI):
        await init_db.create_schema()
        yield
        app.state.app_context.save()

    app = fastapi.FastAPI(
        title=settings.SERVICE_NAME,
        description="Clients, work days, worker assignments and payment tracking",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.app_context = app_context

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CleaningTrackerError)
    async def handle_app_error(request: fastapi.Request, exc: CleaningTrackerError):
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, NotAuthenticatedError) else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: fastapi.Request, exc: SQLAlchemyError):
        logger.error("Store operation failed on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Store operation failed"})

    # Include routers
    app.include_router(health_check.router)
    app.include_router(auth.router)
    app.include_router(clients.router)
    app.include_router(workers.router)
    app.include_router(reports.router)
    app.include_router(work_days.router)
    app.include_router(dashboard.router)
    app.include_router(preferences.router)

    return app
