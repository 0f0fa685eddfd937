"""
Data models for SkyRadius.

Plain dataclasses built per request; there is no database.
"""

from skyradius.models.aircraft import AircraftRecord, FlightRoute, NOT_AVAILABLE

__all__ = [
    'AircraftRecord',
    'FlightRoute',
    'NOT_AVAILABLE',
]
