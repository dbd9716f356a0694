"""Health check endpoints.

Mounted at the application root, outside the versioned API prefix.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from hr_payroll import __version__
from hr_payroll.api.dependencies import DbSession
from hr_payroll.models import Employee

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service and database status."""

    status: str
    version: str
    timestamp: datetime
    database: str
    driver: str
    schema_ready: bool


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession) -> HealthResponse:
    """Probe the database and check the payroll schema is in place."""
    dialect = db.get_bind().dialect
    db_status = "unhealthy"
    schema_ready = False
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
        await db.execute(select(func.count()).select_from(Employee))
        schema_ready = True
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)

    return HealthResponse(
        status="healthy" if db_status == "healthy" and schema_ready else "degraded",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        driver=f"{dialect.name}+{dialect.driver}",
        schema_ready=schema_ready,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check() -> dict[str, str]:
    """Ready once the app has started."""
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
