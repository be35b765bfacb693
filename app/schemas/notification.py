# app/schemas/notification.py
from pydantic import BaseModel
from datetime import datetime


class NotificationOut(BaseModel):
    level: str
    message: str
    created_at: datetime

    class Config:
        from_attributes = True
