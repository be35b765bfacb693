# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL. All models are auto-imported in
create_tables() so every table is created in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Auto-reconnect if DB connection drops
    pool_size=10,
    max_overflow=20,
    echo=False,                  # Set True to log all SQL queries (debug only)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables. Safe to call multiple times.
    Pass `bind` to target another engine (tests use in-memory SQLite).
    """
    from app.models.map_settings import MapSettings                     # noqa
    from app.models.fleet_vehicle import FleetVehicle                   # noqa
    from app.models.volunteer_assignment import VolunteerAssignment     # noqa
    from app.models.geofence_alert import GeofenceAlert                 # noqa

    Base.metadata.create_all(bind=bind or engine)
