import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text
from datetime import datetime

from app.database import get_session
from app.models.general_settings import SiteStatus, SystemStatus

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/check")
def health_check(session: Session = Depends(get_session)):
    db_status = "ok"
    site_status = SiteStatus.online.value

    try:
        # simple DB ping
        session.exec(text("SELECT 1"))
        status = session.get(SystemStatus, 1)
        if status:
            site_status = status.status.value
    except SQLAlchemyError as e:
        logger.error(f"Health check database ping failed: {e}")
        db_status = "failed"

    return {
        "status": "ok",
        "database": db_status,
        "site_status": site_status,
        "timestamp": datetime.utcnow().isoformat()
    }
