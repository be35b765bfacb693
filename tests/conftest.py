"""Shared fixtures: an in-memory SQLite database and row builders."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import create_tables
from app.models.fleet_vehicle import FleetVehicle
from app.models.map_settings import MapSettings
from app.models.volunteer_assignment import VolunteerAssignment
from app.models.geofence_alert import GeofenceAlert

# Boundary used throughout: Bengaluru operational area
SW = (12.70, 77.30)
NE = (13.20, 77.90)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def add_boundary(db, sw=SW, ne=NE, name="default"):
    row = MapSettings(
        name=name, center_lat=12.97, center_lng=77.59, zoom_level=12,
        bounds_sw_lat=sw[0] if sw else None, bounds_sw_lng=sw[1] if sw else None,
        bounds_ne_lat=ne[0] if ne else None, bounds_ne_lng=ne[1] if ne else None,
        updated_at=datetime.utcnow(),
    )
    db.add(row)
    db.commit()
    return row


def add_vehicle(db, number="V1", lat=None, lng=None, status="in_use", vehicle_type="ambulance"):
    vehicle = FleetVehicle(
        vehicle_number=number, vehicle_type=vehicle_type, status=status,
        current_location={"lat": lat, "lng": lng} if lat is not None else None,
        created_at=datetime.utcnow(), updated_at=datetime.utcnow(),
    )
    db.add(vehicle)
    db.commit()
    return vehicle


def add_volunteer(db, volunteer_id="vol-7", lat=None, lng=None, status="en_route"):
    assignment = VolunteerAssignment(
        volunteer_id=volunteer_id, status=status,
        current_location={"lat": lat, "lng": lng} if lat is not None else None,
        assigned_at=datetime.utcnow(),
    )
    db.add(assignment)
    db.commit()
    return assignment


def move(db, row, lat=None, lng=None):
    """Report a new position (None marks it unknown)."""
    row.current_location = {"lat": lat, "lng": lng} if lat is not None else None
    db.commit()


def add_alert(db, entity_id="1", entity_type="vehicle", status="active", created_at=None, label="V1 (ambulance)"):
    alert = GeofenceAlert(
        entity_type=entity_type, entity_id=entity_id, entity_label=label,
        latitude=12.5, longitude=77.5, alert_type="exit", status=status,
        created_at=created_at or datetime.utcnow(),
    )
    db.add(alert)
    db.commit()
    return alert
