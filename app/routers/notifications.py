"""Toast notification feed polled by the dashboard."""

from fastapi import APIRouter, Depends, Query
from app.schemas.notification import NotificationOut
from app.services.notification_service import NotificationService, get_notifications

router = APIRouter()


@router.get("/notifications", response_model=list[NotificationOut], summary="Recent notifications")
def recent_notifications(limit: int = Query(50, ge=1, le=500),
                         notifier: NotificationService = Depends(get_notifications)):
    """Newest first."""
    return notifier.recent(limit)
