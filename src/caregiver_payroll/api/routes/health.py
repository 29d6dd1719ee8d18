"""Liveness, readiness and database health probes."""

import logging
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError

from caregiver_payroll.api.dependencies import DbSession
from caregiver_payroll.models import CheckNumberCounter, PayrollRecord

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    database: Literal["healthy", "unhealthy"]
    checked_at: datetime


class ReadinessResponse(BaseModel):
    ready: bool
    missing: list[str] = []


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DbSession) -> HealthResponse:
    """Report whether the database answers. Always 200; degraded is in the body."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        database = "unhealthy"
    else:
        database = "healthy"

    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        database=database,
        checked_at=datetime.now(timezone.utc),
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(db: DbSession, response: Response) -> ReadinessResponse:
    """Ready once the payroll and check-counter tables can be queried."""
    missing = []
    for model in (PayrollRecord, CheckNumberCounter):
        try:
            await db.execute(select(model).limit(1))
        except SQLAlchemyError:
            logger.warning("Table %s not queryable", model.__tablename__, exc_info=True)
            await db.rollback()
            missing.append(model.__tablename__)

    if missing:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(ready=not missing, missing=missing)


@router.get("/live")
async def liveness_check() -> dict[str, bool]:
    """The process is up and serving requests."""
    return {"alive": True}
