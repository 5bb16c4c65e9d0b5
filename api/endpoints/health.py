"""Health check endpoints for monitoring."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from api.config.settings import settings
from api.config.database import get_db
from processor.config import settings as processor_settings

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    database: str
    classifier: str


def check_database(db: Session) -> tuple[str, str | None]:
    """Check database connectivity."""
    try:
        result = db.execute(text("SELECT 1"))
        result.fetchone()
        return "connected", None
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return "disconnected", str(e)


def check_classifier() -> str:
    """Report whether the sentiment classifier has credentials."""
    if not processor_settings.ANTHROPIC_API_KEY:
        return "not_configured"
    return "configured"


@router.get("", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse)
async def health_check(
    db: Session = Depends(get_db),
) -> HealthResponse:
    """
    Basic health check endpoint.

    The service is healthy when the database answers; a missing classifier
    key is reported but only fails analysis requests.
    """
    db_status, _ = check_database(db)

    if db_status == "connected":
        overall_status = "healthy"
    else:
        overall_status = "unhealthy"

    return HealthResponse(
        status=overall_status,
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        database=db_status,
        classifier=check_classifier(),
    )


@router.get("/ready")
async def readiness_check(
    db: Session = Depends(get_db),
) -> dict:
    """Readiness check: 200 with ready=False until the database answers."""
    db_status, _ = check_database(db)

    if db_status != "connected":
        return {"ready": False, "reason": "Database not connected"}

    return {"ready": True}


@router.get("/live")
async def liveness_check() -> dict:
    """Liveness check."""
    return {"alive": True}
