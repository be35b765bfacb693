"""
Containment check: is a coordinate inside the operational boundary?

Plain axis-aligned rectangle test on lat/lng, edges inclusive.
Known limitation: no geodesic correction and no antimeridian or pole
handling. Boundaries with sw.lng > ne.lng are refused when configured
(see schemas.map_settings.OperationalBoundary), so they never reach here.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Bounds:
    sw_lat: Optional[float]
    sw_lng: Optional[float]
    ne_lat: Optional[float]
    ne_lng: Optional[float]

    @property
    def is_set(self) -> bool:
        return None not in (self.sw_lat, self.sw_lng, self.ne_lat, self.ne_lng)

    def as_dict(self) -> dict:
        return {
            "southwest": {"lat": self.sw_lat, "lng": self.sw_lng},
            "northeast": {"lat": self.ne_lat, "lng": self.ne_lng},
        }


def is_inside(lat: float, lng: float, boundary: Optional[Bounds]) -> bool:
    """True when (lat, lng) lies in the boundary. No boundary means everything is inside."""
    if boundary is None or not boundary.is_set:
        return True

    return (
        boundary.sw_lat <= lat <= boundary.ne_lat
        and boundary.sw_lng <= lng <= boundary.ne_lng
    )
