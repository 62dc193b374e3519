"""Health and probe endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from labor_engine.api.dependencies import DbSession
from labor_engine.compliance.rules import ALL_RULES
from labor_engine.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service status plus the rule set and clock it is running with."""

    status: str
    timestamp: datetime
    database: str
    engine_version: str
    rules_loaded: int
    org_timezone: str
    org_date: str


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check(db: DbSession) -> HealthResponse:
    """Report database reachability; a database failure degrades, not fails, the check."""
    settings = get_settings()
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        database = "unhealthy"

    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=database,
        engine_version=settings.engine_version,
        rules_loaded=len(ALL_RULES),
        org_timezone=settings.org_timezone,
        org_date=settings.today().isoformat(),
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check() -> dict[str, str]:
    """Readiness probe."""
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "alive"}
