"""
OpenSky state vector decoding.

OpenSky state vector format (array indices, extended=1):
0: icao24          - ICAO24 hex address
1: callsign        - Callsign (8 chars max)
2: origin_country  - Country of registration
3: time_position   - Unix timestamp of last position update
4: last_contact    - Unix timestamp of last message
5: longitude       - WGS84 longitude
6: latitude        - WGS84 latitude
7: baro_altitude   - Barometric altitude (meters)
8: on_ground       - Boolean
9: velocity        - Ground speed (m/s)
10: true_track     - Track angle (degrees, 0=north)
11: vertical_rate  - Vertical rate (m/s)
12: sensors        - Sensor IDs (array)
13: geo_altitude   - Geometric altitude (meters)
14: squawk         - Transponder code
15: spi            - Special position indicator
16: position_source - 0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM
17: category       - Emitter category (only with extended=1)
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, List, Any, Iterable

from skyradius.geo import distance_miles
from skyradius.models import AircraftRecord

logger = logging.getLogger(__name__)

FEET_PER_METER = 3.28084
KNOTS_PER_MPS = 1.94384
FPM_PER_MPS = 196.85

# ADS-B emitter categories as reported by OpenSky
CATEGORY_LABELS = {
    0: 'No info',
    1: 'No ADS-B info',
    2: 'Light (< 15,500 lbs)',
    3: 'Small (15,500-75,000 lbs)',
    4: 'Large (75,000-300,000 lbs)',
    5: 'High Vortex Large (B-757)',
    6: 'Heavy (> 300,000 lbs)',
    7: 'High Performance',
    8: 'Rotorcraft',
    9: 'Glider/Sailplane',
    10: 'Lighter-than-air',
    11: 'Parachutist/Skydiver',
    12: 'Ultralight/Paraglider',
    13: 'Reserved',
    14: 'UAV',
    15: 'Space Vehicle',
    16: 'Emergency Vehicle',
    17: 'Service Vehicle',
    18: 'Point Obstacle',
    19: 'Cluster Obstacle',
    20: 'Line Obstacle',
}

UNKNOWN_CATEGORY = 'Unknown'


def round_half_up(value: float) -> int:
    """Round to nearest integer, .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def meters_to_feet(value: Optional[float]) -> int:
    if value is None:
        return 0
    return round_half_up(value * FEET_PER_METER)


def mps_to_knots(value: Optional[float]) -> int:
    if value is None:
        return 0
    return round_half_up(value * KNOTS_PER_MPS)


def mps_to_fpm(value: Optional[float]) -> int:
    if value is None:
        return 0
    return round_half_up(value * FPM_PER_MPS)


def round_heading(value: Optional[float]) -> int:
    if value is None:
        return 0
    return round_half_up(value)


def category_label(code: Any) -> str:
    """Human-readable label for an emitter category code."""
    return CATEGORY_LABELS.get(code, UNKNOWN_CATEGORY)


@dataclass
class StateVector:
    """
    Parsed state vector from OpenSky API.

    Normalizes the raw array format into a typed dataclass.
    All values may be None if not reported by the aircraft.
    """
    icao24: str
    callsign: Optional[str]
    origin_country: Optional[str]
    time_position: Optional[int]
    last_contact: Optional[int]
    longitude: Optional[float]
    latitude: Optional[float]
    baro_altitude: Optional[float]
    on_ground: bool
    velocity: Optional[float]
    true_track: Optional[float]
    vertical_rate: Optional[float]
    geo_altitude: Optional[float]
    squawk: Optional[str]
    spi: bool
    position_source: Optional[int]
    category: int = 0

    @classmethod
    def from_array(cls, arr: List[Any]) -> Optional['StateVector']:
        """
        Parse OpenSky state vector array into StateVector object.

        Returns None if the array is malformed or missing required fields.
        The category column is only present with extended=1 and defaults to 0.
        """
        if not isinstance(arr, (list, tuple)) or len(arr) < 17:
            return None

        icao24 = arr[0]
        if not icao24 or not isinstance(icao24, str):
            return None

        # Normalize callsign (strip whitespace, handle None)
        callsign = arr[1]
        if callsign:
            callsign = callsign.strip() or None

        category = arr[17] if len(arr) > 17 else None

        return cls(
            icao24=icao24.strip().lower(),
            callsign=callsign,
            origin_country=arr[2],
            time_position=arr[3],
            last_contact=arr[4],
            longitude=arr[5],
            latitude=arr[6],
            baro_altitude=arr[7],
            on_ground=bool(arr[8]),
            velocity=arr[9],
            true_track=arr[10],
            vertical_rate=arr[11],
            geo_altitude=arr[13],
            squawk=arr[14],
            spi=bool(arr[15]),
            position_source=arr[16],
            category=category or 0,
        )

    def has_position(self) -> bool:
        """Check if this state has valid position data."""
        return self.latitude is not None and self.longitude is not None

    @property
    def display_callsign(self) -> str:
        """Callsign for display, with fallback."""
        return self.callsign or self.icao24.upper()


def decode_states(rows: Optional[Iterable[Any]]) -> List[StateVector]:
    """
    Parse raw OpenSky rows, keeping only well-formed positional reports.
    """
    states = []
    for arr in rows or []:
        sv = StateVector.from_array(arr)
        if sv and sv.has_position():
            states.append(sv)

    logger.debug(f'Decoded {len(states)} positional state vectors')
    return states


def to_aircraft_record(
    sv: StateVector,
    center_lat: float,
    center_lon: float,
) -> Optional[AircraftRecord]:
    """
    Convert a state vector to display units relative to a search center.

    Returns None for non-positional reports.
    """
    if not sv.has_position():
        return None

    distance = distance_miles(center_lat, center_lon, sv.latitude, sv.longitude)

    return AircraftRecord(
        icao24=sv.icao24,
        callsign=sv.display_callsign,
        origin_country=sv.origin_country,
        latitude=sv.latitude,
        longitude=sv.longitude,
        altitude=meters_to_feet(sv.baro_altitude),
        ground_speed=mps_to_knots(sv.velocity),
        heading=round_heading(sv.true_track),
        vertical_rate=mps_to_fpm(sv.vertical_rate),
        on_ground=sv.on_ground,
        category=category_label(sv.category),
        distance_from_center=round_half_up(distance * 10) / 10,
        route_callsign=sv.callsign,
    )
