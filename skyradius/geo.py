"""
Geometry helpers for radius searches.

Distances are in statute miles throughout, matching the query interface.

Known limitation: the longitude span of a bounding box is scaled by
1/cos(latitude). Near the poles that factor grows without bound, so a
search centred at +/-90 degrees produces an effectively unbounded
longitude range. This is left as-is; the distance filter applied after
the fetch still enforces the true radius.
"""

import math
from dataclasses import dataclass

EARTH_RADIUS_MILES = 3959.0

# Approximate statute miles per degree of latitude
MILES_PER_DEGREE = 69.0


def distance_miles(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points in miles.

    Uses the Haversine formula. NaN inputs propagate to a NaN result.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_MILES * c


@dataclass
class BoundingBox:
    """
    Geographic bounding box for API queries.

    OpenSky expects: lamin, lomin, lamax, lomax
    (latitude min, longitude min, latitude max, longitude max)
    """
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    @classmethod
    def from_center_radius(
        cls,
        center_lat: float,
        center_lon: float,
        radius_miles: float
    ) -> 'BoundingBox':
        """
        Create bounding box from center point and radius.

        Longitude degrees shrink with latitude, so the longitude delta is
        widened by 1/cos(lat) to approximate a circle on the sphere.
        """
        lat_delta = radius_miles / MILES_PER_DEGREE
        lon_delta = radius_miles / (MILES_PER_DEGREE * math.cos(center_lat * math.pi / 180))

        return cls(
            lat_min=center_lat - lat_delta,
            lat_max=center_lat + lat_delta,
            lon_min=center_lon - lon_delta,
            lon_max=center_lon + lon_delta,
        )

    def to_params(self) -> dict:
        """Convert to OpenSky API query parameters."""
        return {
            'lamin': self.lat_min,
            'lamax': self.lat_max,
            'lomin': self.lon_min,
            'lomax': self.lon_max,
        }


def bounding_box(lat: float, lon: float, radius_miles: float) -> BoundingBox:
    """Bounding box around (lat, lon) covering radius_miles."""
    return BoundingBox.from_center_radius(lat, lon, radius_miles)
