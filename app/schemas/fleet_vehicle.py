# app/schemas/fleet_vehicle.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from app.schemas.map_settings import LatLng


class VehicleCreate(BaseModel):
    vehicle_number: str
    vehicle_type: str = "ambulance"
    status: str = "available"
    capacity: Optional[int] = None
    fuel_level: Optional[float] = None
    current_location: Optional[LatLng] = None


class VehicleOut(BaseModel):
    id: int
    vehicle_number: str
    vehicle_type: str
    status: str
    capacity: Optional[int]
    fuel_level: Optional[float]
    current_location: Optional[dict]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class LocationUpdate(BaseModel):
    location: Optional[LatLng] = None     # null marks the position unknown


class StatusUpdate(BaseModel):
    status: str
