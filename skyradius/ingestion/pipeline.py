"""
Search pipeline - orchestrates one radius search from OpenSky to JSON.

Pipeline stages:
1. Fetch: Query OpenSky for state vectors inside the bounding box
2. Decode: Convert positional states to display-unit records
3. Filter: Drop records outside the radius, sort nearest first
4. Enrich: Time-boxed route/type lookups for the nearest candidates

Upstream failures (OpenSkyHTTPError, OpenSkyUnavailable) propagate to the
caller. Enrichment failures never do; affected records keep 'N/A'.
The pipeline holds no per-request state, so one instance serves all
requests.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional, List

from skyradius.config import EnrichmentConfig, config
from skyradius.ingestion.decoder import StateVector, to_aircraft_record
from skyradius.ingestion.opensky_client import OpenSkyClient
from skyradius.models import AircraftRecord
from skyradius.services.flight_info import FlightInfoService, enrich_records

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """Records within the radius, nearest first, plus the snapshot time."""
    timestamp: float
    flights: List[AircraftRecord]

    @property
    def count(self) -> int:
        return len(self.flights)

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'count': self.count,
            'flights': [f.to_dict() for f in self.flights],
        }


def filter_and_sort(
    states: List[StateVector],
    center_lat: float,
    center_lon: float,
    radius_miles: float,
) -> List[AircraftRecord]:
    """
    Convert states to records, keep those within radius, nearest first.
    """
    records = []
    for sv in states:
        record = to_aircraft_record(sv, center_lat, center_lon)
        if record and record.distance_from_center <= radius_miles:
            records.append(record)

    records.sort(key=lambda r: r.distance_from_center)
    return records


class FlightSearchPipeline:
    """
    Runs radius searches against OpenSky with adsbdb enrichment.
    """

    def __init__(
        self,
        client: Optional[OpenSkyClient] = None,
        flight_info: Optional[FlightInfoService] = None,
        enrichment: Optional[EnrichmentConfig] = None,
    ):
        """
        Initialize the search pipeline.

        Args:
            client: OpenSky API client (created from config if None)
            flight_info: adsbdb lookup service (created from config if None)
            enrichment: fan-out limits (config.enrichment if None)
        """
        self.client = client or OpenSkyClient.from_config()
        self.enrichment = enrichment or config.enrichment
        self.flight_info = flight_info or FlightInfoService.from_config(enrichment=self.enrichment)

    def search(
        self,
        center_lat: float,
        center_lon: float,
        radius_miles: float,
    ) -> SearchResult:
        """
        Execute one search.

        Raises:
            OpenSkyHTTPError: OpenSky rejected the request
            OpenSkyUnavailable: OpenSky could not be reached
        """
        start_time = time.perf_counter()

        # Stage 1: Fetch from OpenSky
        snapshot = self.client.get_states_by_location(center_lat, center_lon, radius_miles)

        # Stages 2-3: Decode, filter to the true radius, sort
        flights = filter_and_sort(snapshot.states, center_lat, center_lon, radius_miles)
        logger.info(
            f'{len(flights)} of {len(snapshot.states)} aircraft within '
            f'{radius_miles:g} mi of ({center_lat:.4f}, {center_lon:.4f})'
        )

        # Stage 4: Enrich the nearest candidates
        if flights:
            try:
                enrich_records(
                    flights,
                    self.flight_info,
                    max_candidates=self.enrichment.max_candidates,
                    deadline=self.enrichment.deadline_seconds,
                    stagger=self.enrichment.stagger_seconds,
                    max_workers=self.enrichment.max_workers,
                )
            except Exception:
                # Records written so far stay; the rest keep N/A
                logger.exception('Enrichment failed; returning unenriched flights')

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(f'Search completed in {elapsed_ms:.0f}ms')

        return SearchResult(timestamp=snapshot.time, flights=flights)
