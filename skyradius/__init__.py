"""
SkyRadius Backend Package.

Nearby-flights aggregation service built with Flask and requests.

Modules:
    api/         REST endpoint for the radius flight search
    models/      Output records (AircraftRecord, FlightRoute)
    ingestion/   OpenSky client, state vector decoding and the search pipeline
    services/    adsbdb.com route and aircraft-type enrichment
    geo.py       Haversine distance and bounding boxes
    retry.py     Retry policy with exponential backoff
    fanout.py    Concurrent task fan-out bounded by a deadline
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
