"""
Aircraft output records.

AircraftRecord is the unit of the /api/flights response. It is created
from a decoded state vector, optionally filled in by enrichment, then
serialized and discarded. Nothing here is persisted.
"""

from dataclasses import dataclass, field
from typing import Optional

# Placeholder for enrichment fields that have no data
NOT_AVAILABLE = 'N/A'


@dataclass
class FlightRoute:
    """Departure/arrival airport codes for a callsign (IATA preferred)."""
    departure: str
    arrival: str


@dataclass
class AircraftRecord:
    """
    A single aircraft near the search center, in display units.

    Fields:
        icao24: 6-character lowercase hex address
        callsign: Display callsign, uppercased icao24 when none was broadcast
        altitude: Barometric altitude in feet (0 if unknown)
        ground_speed: Ground speed in knots (0 if unknown)
        heading: True track in whole degrees (0 if unknown)
        vertical_rate: Vertical rate in ft/min (0 if unknown)
        category: Emitter category label
        distance_from_center: Miles from the search center, 1 decimal
        departure_airport / arrival_airport / aircraft_type: enrichment
            results, 'N/A' until a lookup succeeds
    """
    icao24: str
    callsign: str
    origin_country: Optional[str]
    latitude: float
    longitude: float
    altitude: int
    ground_speed: int
    heading: int
    vertical_rate: int
    on_ground: bool
    category: str
    distance_from_center: float
    departure_airport: str = NOT_AVAILABLE
    arrival_airport: str = NOT_AVAILABLE
    aircraft_type: str = NOT_AVAILABLE

    # Broadcast callsign used for route lookups (None if not broadcast).
    # Unlike `callsign`, it never falls back to the icao24 hex address, so
    # aircraft without a callsign get no route lookup.
    route_callsign: Optional[str] = field(default=None, repr=False)

    def apply_route(self, route: Optional[FlightRoute]) -> None:
        """Fill in airports; a missing route keeps the placeholders."""
        if route is None:
            return
        self.departure_airport = route.departure
        self.arrival_airport = route.arrival

    def apply_aircraft_type(self, aircraft_type: Optional[str]) -> None:
        if aircraft_type:
            self.aircraft_type = aircraft_type

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'icao24': self.icao24,
            'callsign': self.callsign,
            'originCountry': self.origin_country,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'altitude': self.altitude,
            'groundSpeed': self.ground_speed,
            'heading': self.heading,
            'verticalRate': self.vertical_rate,
            'onGround': self.on_ground,
            'category': self.category,
            'distanceFromCenter': self.distance_from_center,
            'departureAirport': self.departure_airport,
            'arrivalAirport': self.arrival_airport,
            'aircraftType': self.aircraft_type,
        }
