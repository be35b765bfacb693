# app/schemas/map_settings.py
from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional


class LatLng(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class OperationalBoundary(BaseModel):
    """
    Axis-aligned lat/lng rectangle. Boundaries crossing the antimeridian
    (sw.lng > ne.lng) are refused: containment is a plain rectangle test.
    """
    southwest: LatLng
    northeast: LatLng

    @model_validator(mode="after")
    def _check_corners(self):
        if self.southwest.lat > self.northeast.lat:
            raise ValueError("southwest.lat must be <= northeast.lat")
        if self.southwest.lng > self.northeast.lng:
            raise ValueError("southwest.lng must be <= northeast.lng (antimeridian-crossing boundaries are not supported)")
        return self


class MapSettingsOut(BaseModel):
    id: int
    name: str
    center_lat: float
    center_lng: float
    zoom_level: int
    bounds_sw_lat: Optional[float]
    bounds_sw_lng: Optional[float]
    bounds_ne_lat: Optional[float]
    bounds_ne_lng: Optional[float]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class MapSettingsUpdate(BaseModel):
    boundary: Optional[OperationalBoundary] = None   # null clears the boundary
    center_lat: Optional[float] = Field(None, ge=-90, le=90)
    center_lng: Optional[float] = Field(None, ge=-180, le=180)
    zoom_level: Optional[int] = Field(None, ge=1, le=22)
