"""
Map settings table — holds the single active operational boundary.
A row with any of the four bounds NULL means "no boundary configured".
"""

from sqlalchemy import Column, Integer, String, DateTime, Float
from app.database import Base


class MapSettings(Base):
    __tablename__ = "map_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    center_lat = Column(Float, nullable=False)
    center_lng = Column(Float, nullable=False)
    zoom_level = Column(Integer, nullable=False, default=12)
    bounds_sw_lat = Column(Float)
    bounds_sw_lng = Column(Float)
    bounds_ne_lat = Column(Float)
    bounds_ne_lng = Column(Float)
    updated_at = Column(DateTime)

    def __repr__(self):
        return (f"<MapSettings {self.name} sw=({self.bounds_sw_lat},{self.bounds_sw_lng}) "
                f"ne=({self.bounds_ne_lat},{self.bounds_ne_lng})>")
