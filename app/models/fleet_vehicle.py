"""
Fleet vehicles table — response vehicles whose position is tracked.
current_location is a JSON object {"lat": .., "lng": ..} or NULL when unknown.
"""

from sqlalchemy import Column, Integer, String, DateTime, Float, JSON
from app.database import Base


class FleetVehicle(Base):
    __tablename__ = "fleet_vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_number = Column(String(50), unique=True, nullable=False, index=True)
    vehicle_type = Column(String(50), nullable=False, default="ambulance")
    status = Column(String(30), nullable=False, default="available", index=True)  # available | in_use | maintenance | offline
    capacity = Column(Integer)
    fuel_level = Column(Float)
    current_location = Column(JSON)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<FleetVehicle {self.vehicle_number} type={self.vehicle_type} status={self.status}>"
