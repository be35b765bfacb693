# app/services/notification_service.py
"""
Push-style toast notifications for the dashboard.

Every notification is logged and kept in a bounded in-memory history that
the UI polls via GET /notifications. When NOTIFY_WEBHOOK_URL is set it is
also POSTed there as JSON. Webhook failures are logged, never raised.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import httpx

from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class Notification:
    level: str               # success | info | warning | error
    message: str
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_payload(self) -> dict:
        return {
            "level": self.level,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }


class NotificationService:
    def __init__(self, webhook_url: Optional[str] = None, history_size: int = None,
                 transport: httpx.AsyncBaseTransport = None):
        self.webhook_url = webhook_url or settings.NOTIFY_WEBHOOK_URL
        self._history = deque(maxlen=history_size or settings.NOTIFY_HISTORY_SIZE)
        self._transport = transport

    async def notify(self, level: str, message: str) -> Notification:
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown notification level: {level}")

        notification = Notification(level=level, message=message)
        self._history.appendleft(notification)
        logger.log(_LOG_LEVELS[level], f"[NOTIFY][{level.upper()}] {message}")

        if self.webhook_url:
            await self._push(notification)
        return notification

    async def _push(self, notification: Notification):
        try:
            async with httpx.AsyncClient(timeout=5, transport=self._transport) as client:
                response = await client.post(self.webhook_url, json=notification.to_payload())
            if response.status_code >= 400:
                logger.warning(f"[NOTIFY] Webhook returned HTTP {response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"[NOTIFY] Webhook delivery failed: {e}")

    def recent(self, limit: int = 50) -> list[Notification]:
        """Newest first."""
        return list(self._history)[:limit]

    def clear(self):
        self._history.clear()


notifications = NotificationService()


def get_notifications() -> NotificationService:
    """FastAPI dependency."""
    return notifications
