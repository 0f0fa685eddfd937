"""Pytest configuration and fixtures for SkyRadius tests."""

import json
import threading

import pytest
import requests

from skyradius.app import create_app
from skyradius.config import EnrichmentConfig
from skyradius.ingestion import FlightSearchPipeline, OpenSkyClient
from skyradius.retry import RetryPolicy
from skyradius.services import FlightInfoService


def make_response(status_code=200, body=None, text=None, url='https://example.test'):
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    if body is not None:
        response._content = json.dumps(body).encode('utf-8')
        response.headers['Content-Type'] = 'application/json'
    else:
        response._content = (text or '').encode('utf-8')
    return response


class FakeSession:
    """
    Stand-in for requests.Session.

    `handler(url, **kwargs)` returns a Response or raises. Every call is
    recorded as (url, kwargs).
    """

    def __init__(self, handler):
        self.handler = handler
        self.calls = []
        self._lock = threading.Lock()

    def get(self, url, **kwargs):
        with self._lock:
            self.calls.append((url, kwargs))
        return self.handler(url, **kwargs)

    def urls(self):
        with self._lock:
            return [url for url, _ in self.calls]


def state_row(
    icao24='abc123',
    callsign='TEST123 ',
    lat=40.0,
    lon=-75.0,
    baro_altitude=1000.0,
    on_ground=False,
    velocity=100.0,
    true_track=90.0,
    vertical_rate=5.0,
    category=None,
    extended=True,
):
    """One OpenSky state vector row (18 columns when extended)."""
    row = [
        icao24,          # icao24
        callsign,        # callsign
        'United States', # origin_country
        1714765198,      # time_position
        1714765200,      # last_contact
        lon,             # longitude
        lat,             # latitude
        baro_altitude,   # baro_altitude meters
        on_ground,       # on_ground
        velocity,        # velocity m/s
        true_track,      # true_track
        vertical_rate,   # vertical_rate m/s
        None,            # sensors
        1050.0,          # geo_altitude meters
        '7000',          # squawk
        False,           # spi
        0,               # position_source
    ]
    if extended:
        row.append(category)
    return row


@pytest.fixture
def backoff_delays():
    """Records backoff delays instead of sleeping."""
    delays = []
    return delays


@pytest.fixture
def make_pipeline(backoff_delays):
    """
    Factory for a pipeline wired to fake OpenSky and adsbdb sessions.
    """
    def factory(opensky_handler, adsbdb_handler=None, **enrichment):
        opensky_session = FakeSession(opensky_handler)
        adsbdb_session = FakeSession(adsbdb_handler or (lambda url, **kw: make_response(404, text='not found')))

        client = OpenSkyClient(
            base_url='https://opensky.test/api',
            retry_policy=RetryPolicy(max_attempts=3, backoff_base=1.0, sleep=backoff_delays.append),
            session=opensky_session,
        )
        flight_info = FlightInfoService(base_url='https://adsbdb.test/v0', session=adsbdb_session)

        settings = dict(max_candidates=30, deadline_seconds=5.0, stagger_seconds=0.0, max_workers=60)
        settings.update(enrichment)

        pipeline = FlightSearchPipeline(
            client=client,
            flight_info=flight_info,
            enrichment=EnrichmentConfig(**settings),
        )
        return pipeline, opensky_session, adsbdb_session

    return factory


@pytest.fixture
def make_client(make_pipeline):
    """Factory for a Flask test client around make_pipeline()."""
    def factory(opensky_handler, adsbdb_handler=None, **enrichment):
        pipeline, opensky_session, adsbdb_session = make_pipeline(
            opensky_handler, adsbdb_handler, **enrichment
        )
        app = create_app(pipeline=pipeline)
        app.config['TESTING'] = True
        return app.test_client(), opensky_session, adsbdb_session

    return factory
