from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from sundaystore.database.session import get_db
from sundaystore.schemas.health import HealthCheckResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse)
def health_check(db: Session = Depends(get_db)) -> HealthCheckResponse:
    """Health check endpoint."""
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database ping failed: {e}")
        return HealthCheckResponse(status="degraded", database="unavailable")

    return HealthCheckResponse()
