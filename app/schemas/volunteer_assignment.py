# app/schemas/volunteer_assignment.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from app.schemas.map_settings import LatLng


class AssignmentCreate(BaseModel):
    volunteer_id: str
    operation_id: Optional[str] = None
    status: str = "idle"
    current_location: Optional[LatLng] = None


class AssignmentOut(BaseModel):
    id: int
    volunteer_id: str
    operation_id: Optional[str]
    status: str
    current_location: Optional[dict]
    assigned_at: Optional[datetime]
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True
