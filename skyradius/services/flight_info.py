"""
Flight information service - enriches flights with route and type data.

Integrates with adsbdb.com (free, no API key) to get:
- Origin/destination airports by callsign
- Aircraft manufacturer/model by ICAO24 address

Enrichment is best-effort: every failure (HTTP error, timeout, bad JSON)
is logged and turned into "no data". Nothing here raises to the caller.

adsbdb allows roughly 60 requests per 60 seconds, so only the nearest
candidates are enriched and their start times are staggered.
"""

import logging
import time
from typing import Optional, List, Any
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from skyradius.config import AdsbdbConfig, EnrichmentConfig, config
from skyradius.fanout import FanOutResult, run_with_deadline
from skyradius.models import AircraftRecord, FlightRoute

logger = logging.getLogger(__name__)


class FlightInfoService:
    """
    Service to fetch route and aircraft information from adsbdb.

    Each lookup is an independent GET with its own timeout. The session is
    shared by every enrichment worker, so its connection pool is sized to
    pool_size.
    """

    def __init__(
        self,
        base_url: str = 'https://api.adsbdb.com/v0',
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
        pool_size: int = 60,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or _pooled_session(pool_size)

    @classmethod
    def from_config(
        cls,
        adsbdb: Optional[AdsbdbConfig] = None,
        enrichment: Optional[EnrichmentConfig] = None,
    ) -> 'FlightInfoService':
        adsbdb = adsbdb or config.adsbdb
        enrichment = enrichment or config.enrichment
        return cls(
            base_url=adsbdb.base_url,
            timeout=adsbdb.timeout_seconds,
            pool_size=enrichment.max_workers,
        )

    def _fetch_response(self, path: str) -> Optional[Any]:
        """
        GET {base_url}/{path} and return the 'response' member of the body.

        Returns None on any failure.
        """
        url = f'{self.base_url}/{path}'
        try:
            response = self.session.get(url, timeout=self.timeout)

            if response.status_code != 200:
                # 404 = not in adsbdb's database
                logger.debug(f'adsbdb {path}: HTTP {response.status_code}')
                return None

            data = response.json()

        except requests.RequestException as e:
            logger.debug(f'adsbdb {path} request failed: {e}')
            return None
        except ValueError as e:
            logger.debug(f'adsbdb {path} returned invalid JSON: {e}')
            return None

        if not isinstance(data, dict):
            return None
        return data.get('response')

    def get_route(self, callsign: Optional[str]) -> Optional[FlightRoute]:
        """
        Get departure/arrival airports for a callsign.

        Each leg prefers the IATA code and falls back to ICAO. Both legs
        must resolve, partial routes are reported as None.
        """
        if not callsign or not callsign.strip():
            return None

        callsign = callsign.strip().upper()
        body = self._fetch_response(f'callsign/{quote(callsign, safe="")}')
        if not isinstance(body, dict):
            return None

        route = body.get('flightroute')
        if not isinstance(route, dict):
            return None

        departure = _airport_code(route.get('origin'))
        arrival = _airport_code(route.get('destination'))

        if not (departure and arrival):
            logger.debug(f'Incomplete route for {callsign}')
            return None

        logger.debug(f'Route for {callsign}: {departure} -> {arrival}')
        return FlightRoute(departure=departure, arrival=arrival)

    def get_aircraft_type(self, icao24: Optional[str]) -> Optional[str]:
        """
        Get a human-readable aircraft model for an ICAO24 address.

        Prefers 'Manufacturer Type', then 'Type', then the ICAO type code.
        """
        if not icao24 or not icao24.strip():
            return None

        icao24 = icao24.strip().upper()
        body = self._fetch_response(f'aircraft/{quote(icao24, safe="")}')
        if not isinstance(body, dict):
            return None

        aircraft = body.get('aircraft')
        if not isinstance(aircraft, dict):
            return None

        manufacturer = aircraft.get('manufacturer') or ''
        type_name = aircraft.get('type') or ''

        if manufacturer and type_name:
            return f'{manufacturer} {type_name}'
        if type_name:
            return type_name
        return aircraft.get('icao_type') or None


def _pooled_session(pool_size: int) -> requests.Session:
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=max(1, pool_size))
    session.mount('http://', adapter)
    session.mount('https://', adapter)
    return session


def _airport_code(airport: Any) -> Optional[str]:
    if not isinstance(airport, dict):
        return None
    return airport.get('iata_code') or airport.get('icao_code') or None


def enrich_records(
    records: List[AircraftRecord],
    service: FlightInfoService,
    max_candidates: int = 30,
    deadline: float = 5.0,
    stagger: float = 0.05,
    max_workers: int = 60,
) -> FanOutResult:
    """
    Enrich the nearest records with route and aircraft type, in place.

    Only the first max_candidates records are looked up (callers pass the
    list sorted by distance). Every lookup runs concurrently; whatever has
    finished when the deadline passes is written back, the rest keeps its
    'N/A' placeholders. Writes happen on the calling thread only.

    Route lookups key on the broadcast callsign (`route_callsign`), not on
    the display callsign, which falls back to the uppercased icao24. A
    record with no broadcast callsign gets only the type lookup.
    """
    candidates = records[:max_candidates]

    def delayed(index: int, fn, arg):
        def task():
            # Spread request starts to stay under adsbdb's rate limit
            if index > 0 and stagger > 0:
                time.sleep(stagger * min(index, 10))
            return fn(arg)
        return task

    tasks = {}
    for index, record in enumerate(candidates):
        tasks[(index, 'route')] = delayed(index, service.get_route, record.route_callsign)
        tasks[(index, 'type')] = delayed(index, service.get_aircraft_type, record.icao24)

    outcome = run_with_deadline(tasks, deadline=deadline, max_workers=max_workers)

    for (index, kind), value in outcome.results.items():
        record = candidates[index]
        if kind == 'route':
            record.apply_route(value)
        else:
            record.apply_aircraft_type(value)

    logger.info(
        f'Enrichment: {len(candidates)} candidates, {outcome.completed} lookups done, '
        f'{outcome.abandoned} abandoned in {outcome.elapsed:.2f}s'
    )
    return outcome

