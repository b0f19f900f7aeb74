"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shiftpay_engine import __version__
from shiftpay_engine.api.dependencies import DbSession
from shiftpay_engine.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str
    version: str
    engine_version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DbSession) -> HealthResponse:
    """Report API version and whether the shift database answers."""
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        database = "unhealthy"

    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=database,
        version=__version__,
        engine_version=get_settings().engine_version,
    )


@router.get("/ready")
async def readiness_check(request: Request, response: Response) -> dict[str, str]:
    """Ready once startup has created the tables and session factory."""
    if getattr(request.app.state, "session_factory", None) is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "starting"}
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
