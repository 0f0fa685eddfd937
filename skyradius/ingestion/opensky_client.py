"""
OpenSky Network API client.

Handles communication with the OpenSky REST API, including:
- Authentication (optional but recommended for higher rate limits)
- Bounding box queries for geographic filtering
- Extended state vectors (emitter category column)
- Retries with exponential backoff on timeouts and network errors

Non-2xx responses are never retried: they surface immediately as
OpenSkyHTTPError carrying the upstream status code.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional, List

import requests
from requests.auth import HTTPBasicAuth

from skyradius.config import OpenSkyConfig, config
from skyradius.errors import OpenSkyHTTPError, OpenSkyUnavailable
from skyradius.geo import BoundingBox
from skyradius.ingestion.decoder import StateVector, decode_states
from skyradius.retry import RetryExhausted, RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class StatesSnapshot:
    """One /states/all response: server time plus positional states."""
    time: int
    states: List[StateVector]


class OpenSkyClient:
    """
    Client for OpenSky Network API.

    Handles:
    - GET requests to /states/all endpoint
    - Optional authentication for higher rate limits
    - Bounding box filtering
    - Per-attempt timeouts and bounded retries
    """

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        base_url: str = 'https://opensky-network.org/api',
        timeout: float = 20.0,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.auth = None
        if username and password:
            self.auth = HTTPBasicAuth(username, password)
            logger.info('OpenSky client initialized with authentication')
        else:
            logger.warning('OpenSky client running without authentication (lower rate limits)')

        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, opensky: Optional[OpenSkyConfig] = None) -> 'OpenSkyClient':
        """Create client from application configuration."""
        opensky = opensky or config.opensky
        credentials = opensky.credentials or (None, None)
        return cls(
            username=credentials[0],
            password=credentials[1],
            base_url=opensky.base_url,
            timeout=opensky.timeout_seconds,
            retry_policy=RetryPolicy(
                max_attempts=opensky.max_attempts,
                backoff_base=opensky.backoff_base_seconds,
            ),
        )

    @property
    def is_authenticated(self) -> bool:
        return self.auth is not None

    def _request_states(self, url: str, params: dict) -> requests.Response:
        """Single attempt; timeouts and connection errors propagate for retry."""
        return self.session.get(
            url,
            params=params,
            auth=self.auth,
            timeout=self.timeout,
        )

    def get_states(self, bbox: BoundingBox) -> StatesSnapshot:
        """
        Fetch current state vectors inside a bounding box.

        Returns:
            StatesSnapshot with the OpenSky server time for this snapshot
            and the states that carry a position.

        Raises:
            OpenSkyHTTPError on a non-2xx response (not retried)
            OpenSkyUnavailable once every attempt has timed out or failed
        """
        url = f'{self.base_url}/states/all'
        params = bbox.to_params()
        params['extended'] = 1

        logger.debug(f'Fetching states: {url} params={params}')

        try:
            response = self.retry_policy.call(self._request_states, url, params)
        except RetryExhausted as e:
            logger.error(f'OpenSky unreachable after {e.attempts} attempts')
            raise OpenSkyUnavailable(e.attempts, e.last_error) from e

        if not response.ok:
            if response.status_code == 429:
                logger.warning('OpenSky rate limit exceeded')
            else:
                logger.error(f'OpenSky API error: {response.status_code} {response.text}')
            details = 'Authentication failed' if response.status_code == 401 else response.text
            raise OpenSkyHTTPError(response.status_code, details)

        data = response.json()

        # Parse response
        api_time = data.get('time') or int(time.time())
        states_raw = data.get('states') or []

        logger.info(f'Received {len(states_raw)} state vectors from OpenSky')

        states = decode_states(states_raw)

        return StatesSnapshot(time=api_time, states=states)

    def get_states_by_location(
        self,
        center_lat: float,
        center_lon: float,
        radius_miles: float,
    ) -> StatesSnapshot:
        """
        Fetch states within radius of a center point.

        Convenience method that constructs bounding box from center + radius.
        """
        bbox = BoundingBox.from_center_radius(center_lat, center_lon, radius_miles)
        return self.get_states(bbox)
