"""
Data ingestion module for SkyRadius.

Handles querying the OpenSky API, decoding state vectors, and running
the per-request search pipeline.
"""

from skyradius.ingestion.opensky_client import OpenSkyClient, StatesSnapshot
from skyradius.ingestion.pipeline import FlightSearchPipeline, SearchResult

__all__ = ['OpenSkyClient', 'StatesSnapshot', 'FlightSearchPipeline', 'SearchResult']
