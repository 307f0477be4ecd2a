# backend/app/routes/v1/health.py
"""
Health check endpoint for monitoring and load balancer probes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db, with_db_retry
from app.core.config import settings
from app.core.constants import API_VERSION
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("", response_model=HealthResponse)
def health_check(response: Response, db: Session = Depends(get_db)) -> HealthResponse:
    """
    Health check with a database ping.

    Returns 503 with status "degraded" when the database is unreachable.
    """
    database = "ok"
    try:
        with_db_retry("health_ping", lambda: db.execute(text("SELECT 1")))
    except SQLAlchemyError as e:
        logger.error(f"Health check database ping failed: {str(e)}")
        database = "error"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if database == "ok" else "degraded",
        database=database,
        version=API_VERSION,
        environment=settings.environment,
    )
