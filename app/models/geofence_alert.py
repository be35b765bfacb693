"""
Geofence alerts table — one row per detected boundary transition.
Created by the geofence monitor after deduplication; status moves
active → acknowledged or active → resolved, never back.
"""

from sqlalchemy import Column, Integer, String, DateTime, Float, Index
from app.database import Base

ALERT_TYPES = ("exit", "enter")
ALERT_STATUSES = ("active", "acknowledged", "resolved")


class GeofenceAlert(Base):
    __tablename__ = "geofence_alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_type = Column(String(20), nullable=False)     # vehicle | volunteer
    entity_id = Column(String(64), nullable=False)
    entity_label = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    alert_type = Column(String(20), nullable=False, default="exit")
    status = Column(String(20), nullable=False, default="active", index=True)
    created_at = Column(DateTime, nullable=False, index=True)
    acknowledged_at = Column(DateTime)
    resolved_at = Column(DateTime)

    __table_args__ = (
        Index("ix_geofence_alerts_entity", "entity_type", "entity_id"),
    )

    def __repr__(self):
        return (f"<GeofenceAlert {self.id} {self.entity_type}:{self.entity_id} "
                f"type={self.alert_type} status={self.status}>")
