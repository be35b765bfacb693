"""
System health check endpoint.
Returns status of backend + DB + geofence monitor.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.services.geofence_monitor import GeofenceMonitor, get_monitor
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), monitor: GeofenceMonitor = Depends(get_monitor)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Geofence monitor state
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "geofence": monitor.status(),
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
