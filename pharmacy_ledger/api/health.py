"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pharmacy_ledger.config import get_settings
from pharmacy_ledger.logging_config import get_logger
from pharmacy_ledger.models.base import get_db

router = APIRouter(tags=["Health"])
logger = get_logger("health")


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Report whether the service can reach its database.

    The ledger cannot accept a single write without the
    database, so an unreachable database marks the service
    degraded rather than failing the check outright.
    """
    settings = get_settings()
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.warning("health_database_unreachable", extra={"error": str(e)})
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "pharmacy-ledger",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": db_status,
    }
