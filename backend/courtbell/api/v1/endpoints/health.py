"""
Health and readiness checks
"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from courtbell.api.v1.deps import get_session_registry
from courtbell.core.config import settings
from courtbell.core.logger import logger
from courtbell.db.database import get_db
from courtbell.services.background_jobs import get_scheduler
from courtbell.services.session_service import SessionRegistry

router = APIRouter()


def _check_database(db: Session) -> tuple[str, str]:
    """Returns (status, detail). Status is 'ok' or 'error'."""
    try:
        db.execute(text("SELECT 1"))
        return "ok", "Database reachable"
    except Exception as e:
        logger.exception("Database check failed")
        return "error", f"Database: {str(e)}"


@router.get("/")
def liveness():
    return {"status": "healthy", "app": settings.APP_NAME}


@router.get("/ready")
async def readiness(
    db: Session = Depends(get_db),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """
    Database connectivity plus scheduler state. Bedrock is not probed; a
    failing suggestion call surfaces as 503 on its own endpoint.
    """
    db_status, db_detail = _check_database(db)
    scheduler = get_scheduler()
    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "database": {"status": db_status, "detail": db_detail},
        "scheduler": {"running": scheduler.running, "jobs": len(scheduler.get_jobs())},
        "storage": settings.STORAGE_BACKEND,
        "openSessions": len(registry),
    }
