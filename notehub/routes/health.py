"""Health check and root endpoints.

``/health`` is a liveness probe and never touches the store. ``/health/ready``
pings MongoDB and answers 503 until the connection is usable.
"""

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from ..database import Database

# Initialize logger
logger = structlog.get_logger(__name__)

router = APIRouter()

SERVICE = "notehub-api"


@router.get("/")
async def root():
    """Root endpoint."""
    logger.info("root_endpoint_accessed")
    return {"message": "Welcome to Notehub API", "docs": "/docs"}


@router.get("/health")
async def health():
    """Liveness check."""
    logger.debug("health_check_requested")
    return {"status": "healthy", "service": SERVICE}


@router.get("/health/ready")
async def readiness():
    """Readiness check: the store answers a ping."""
    if Database.client is None:
        logger.warning("readiness_check_not_connected")
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "service": SERVICE, "database": "disconnected"},
        )

    try:
        await Database.client.admin.command("ping")
    except PyMongoError as e:
        logger.warning("readiness_check_ping_failed", error=str(e), error_type=type(e).__name__)
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "service": SERVICE, "database": "unreachable"},
        )

    return {
        "status": "ready",
        "service": SERVICE,
        "database": "connected",
        "transactions": Database.use_transactions,
    }
