"""
Entity location source: the vehicles and volunteers a sweep should check.

Only vehicles and volunteer assignments in an active status are candidates.
Entities without a usable position are left out of the sweep entirely;
that is not an error.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple
from sqlalchemy.orm import Session
from app.models.fleet_vehicle import FleetVehicle
from app.models.volunteer_assignment import VolunteerAssignment
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

ENTITY_TYPES = ("vehicle", "volunteer")


@dataclass
class TrackedEntity:
    entity_type: str          # vehicle | volunteer
    entity_id: str
    label: str
    lat: float
    lng: float

    @property
    def key(self) -> Tuple[str, str]:
        return (self.entity_type, self.entity_id)

    @property
    def type_name(self) -> str:
        return "Vehicle" if self.entity_type == "vehicle" else "Volunteer"


def parse_position(raw) -> Optional[Tuple[float, float]]:
    """
    Read {"lat": .., "lng": ..} into (lat, lng).
    Returns None for missing, non-numeric, non-finite or out-of-range values.
    """
    if not isinstance(raw, dict):
        return None
    try:
        lat = float(raw["lat"])
        lng = float(raw["lng"])
    except (KeyError, TypeError, ValueError):
        return None

    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return lat, lng


def list_active_vehicles(db: Session) -> list[FleetVehicle]:
    return (
        db.query(FleetVehicle)
        .filter(FleetVehicle.status.in_(settings.ACTIVE_VEHICLE_STATUSES))
        .all()
    )


def list_active_volunteers(db: Session) -> list[VolunteerAssignment]:
    return (
        db.query(VolunteerAssignment)
        .filter(VolunteerAssignment.status.in_(settings.ACTIVE_VOLUNTEER_STATUSES))
        .all()
    )


def list_tracked_entities(db: Session) -> list[TrackedEntity]:
    """All active vehicles and volunteers that currently report a position."""
    entities = []
    dropped = 0

    for v in list_active_vehicles(db):
        pos = parse_position(v.current_location)
        if pos is None:
            dropped += 1
            continue
        entities.append(TrackedEntity(
            entity_type="vehicle",
            entity_id=str(v.id),
            label=f"{v.vehicle_number} ({v.vehicle_type})",
            lat=pos[0],
            lng=pos[1],
        ))

    for a in list_active_volunteers(db):
        pos = parse_position(a.current_location)
        if pos is None:
            dropped += 1
            continue
        entities.append(TrackedEntity(
            entity_type="volunteer",
            entity_id=str(a.id),
            label=f"Volunteer {a.volunteer_id}" if a.volunteer_id else "Volunteer",
            lat=pos[0],
            lng=pos[1],
        ))

    if dropped:
        logger.debug(f"[GEOFENCE] {dropped} active entities without a position skipped")
    return entities
