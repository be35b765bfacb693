# app/schemas/geofence_alert.py
from pydantic import BaseModel
from datetime import datetime
from typing import Literal, Optional


class GeofenceAlertOut(BaseModel):
    id: int
    entity_type: str
    entity_id: str
    entity_label: str
    latitude: float
    longitude: float
    alert_type: Literal["exit", "enter"]
    status: Literal["active", "acknowledged", "resolved"]
    created_at: datetime
    acknowledged_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MonitoringToggle(BaseModel):
    enabled: bool


class SweepOut(BaseModel):
    checked: int
    exits: int
    alerts_created: int
    skipped: Optional[str] = None


class MonitorStatusOut(BaseModel):
    enabled: bool
    loading: bool
    tracked_entities: int
    active_alerts: int
    boundary_configured: bool
    interval_seconds: int
