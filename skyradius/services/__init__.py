"""
External integration services.

Handles third-party lookups with per-call timeouts and graceful
degradation when services are unavailable.
"""

from skyradius.services.flight_info import FlightInfoService, enrich_records

__all__ = ['FlightInfoService', 'enrich_records']
