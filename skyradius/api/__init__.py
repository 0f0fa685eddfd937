"""
REST API blueprints for SkyRadius.
"""

from skyradius.api.flights import flights_bp

__all__ = ['flights_bp']
