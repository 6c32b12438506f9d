"""FastAPI application for Notehub."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from .database import Database
from .exceptions import NotehubError
from .observability import initialize_observability
from .routes import (
    activity_router,
    folders_router,
    health_router,
    notes_router,
    permissions_router,
    public_notes_router,
)

# Initialize logger
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("api_starting")

    initialize_observability()

    await Database.connect()
    logger.info("api_started")

    yield

    logger.info("api_shutting_down")
    await Database.disconnect()
    logger.info("api_shutdown_complete")


app = FastAPI(
    title="Notehub API",
    description="Folder tree, note lifecycle, sharing and activity log for collaborative notes",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(NotehubError)
async def notehub_error_handler(request: Request, exc: NotehubError) -> JSONResponse:
    """Render domain errors as JSON with their status and error code."""
    logger.info(
        "request_failed",
        path=request.url.path,
        code=exc.code.name,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Instrument FastAPI with OpenTelemetry
FastAPIInstrumentor.instrument_app(app)

# Include routers
app.include_router(health_router)
app.include_router(folders_router)
app.include_router(notes_router)
app.include_router(permissions_router)
app.include_router(activity_router)
app.include_router(public_notes_router)
