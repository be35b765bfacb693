# Relief Ops Geofence — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.map_settings import MapSettings                     # noqa
from app.models.fleet_vehicle import FleetVehicle                   # noqa
from app.models.volunteer_assignment import VolunteerAssignment     # noqa
from app.models.geofence_alert import GeofenceAlert                 # noqa
