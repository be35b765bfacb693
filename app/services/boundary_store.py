"""
Boundary store: reads and writes the single active operational boundary,
kept on the map_settings row named settings.MAP_SETTINGS_NAME.

A missing row, or a row with any of its four bounds NULL, reads as "no
boundary" (None). The row is seeded with configured defaults at startup
and is never deleted; clearing the boundary NULLs the four bounds.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.models.map_settings import MapSettings
from app.schemas.map_settings import OperationalBoundary
from app.services.containment import Bounds
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)


def get_map_settings(db: Session) -> Optional[MapSettings]:
    return db.query(MapSettings).filter(MapSettings.name == settings.MAP_SETTINGS_NAME).first()


def default_boundary() -> Optional[OperationalBoundary]:
    """
    The configured default boundary, held to the same rules as an update.
    All four DEFAULT_BOUNDS_* unset means no default boundary. Raises
    ValueError (pydantic's ValidationError included) for a partial or
    invalid configuration.
    """
    bounds = settings.DEFAULT_BOUNDS
    if all(v is None for v in bounds.values()):
        return None
    if any(v is None for v in bounds.values()):
        raise ValueError("DEFAULT_BOUNDS_* must be all set or all unset")

    return OperationalBoundary(
        southwest={"lat": bounds["bounds_sw_lat"], "lng": bounds["bounds_sw_lng"]},
        northeast={"lat": bounds["bounds_ne_lat"], "lng": bounds["bounds_ne_lng"]},
    )


def ensure_default_settings(db: Session) -> MapSettings:
    """Create the map settings row with configured defaults if it does not exist."""
    row = get_map_settings(db)
    if row:
        return row

    boundary = default_boundary()
    row = MapSettings(
        name=settings.MAP_SETTINGS_NAME,
        center_lat=settings.DEFAULT_CENTER_LAT,
        center_lng=settings.DEFAULT_CENTER_LNG,
        zoom_level=settings.DEFAULT_ZOOM_LEVEL,
        updated_at=datetime.utcnow(),
    )
    if boundary is not None:
        row.bounds_sw_lat = boundary.southwest.lat
        row.bounds_sw_lng = boundary.southwest.lng
        row.bounds_ne_lat = boundary.northeast.lat
        row.bounds_ne_lng = boundary.northeast.lng

    db.add(row)
    db.commit()
    logger.info(f"🗺️  Seeded map settings '{row.name}' "
                f"({'default boundary' if boundary else 'no boundary'})")
    return row


def get_boundary(db: Session) -> Optional[Bounds]:
    """The configured boundary, or None when unset."""
    row = get_map_settings(db)
    if not row:
        return None

    bounds = Bounds(
        sw_lat=row.bounds_sw_lat,
        sw_lng=row.bounds_sw_lng,
        ne_lat=row.bounds_ne_lat,
        ne_lng=row.bounds_ne_lng,
    )
    return bounds if bounds.is_set else None


def update_boundary(db: Session, boundary: Optional[OperationalBoundary]) -> MapSettings:
    """Replace the boundary. Passing None clears it (everything counts as inside)."""
    row = ensure_default_settings(db)

    if boundary is None:
        row.bounds_sw_lat = row.bounds_sw_lng = row.bounds_ne_lat = row.bounds_ne_lng = None
    else:
        row.bounds_sw_lat = boundary.southwest.lat
        row.bounds_sw_lng = boundary.southwest.lng
        row.bounds_ne_lat = boundary.northeast.lat
        row.bounds_ne_lng = boundary.northeast.lng

    row.updated_at = datetime.utcnow()
    db.commit()
    logger.info(f"🗺️  Boundary updated: {row}")
    return row
