import threading

import pytest
import requests
from requests.adapters import HTTPAdapter

from conftest import FakeSession, make_response
from skyradius.config import EnrichmentConfig
from skyradius.models import AircraftRecord, NOT_AVAILABLE
from skyradius.services import FlightInfoService, enrich_records


def make_service(handler):
    session = FakeSession(handler)
    return FlightInfoService(base_url='https://adsbdb.test/v0', session=session), session


def route_body(origin=None, destination=None):
    return {'response': {'flightroute': {'origin': origin, 'destination': destination}}}


def make_record(index, callsign='UAL839'):
    return AircraftRecord(
        icao24=f'a{index:05x}',
        callsign=callsign or f'A{index:05X}',
        origin_country='United States',
        latitude=40.0,
        longitude=-75.0,
        altitude=0,
        ground_speed=0,
        heading=0,
        vertical_rate=0,
        on_ground=False,
        category='No info',
        distance_from_center=float(index),
        route_callsign=callsign,
    )


def test_default_session_pool_fits_all_workers():
    service = FlightInfoService.from_config(enrichment=EnrichmentConfig(max_workers=60))

    adapter = service.session.get_adapter('https://api.adsbdb.com/v0/callsign/UAL839')
    assert isinstance(adapter, HTTPAdapter)
    assert adapter._pool_maxsize == 60


# ---------------------------------------------------------------------------
# Route lookups
# ---------------------------------------------------------------------------

def test_route_prefers_iata_codes():
    service, session = make_service(lambda url, **kw: make_response(200, route_body(
        {'iata_code': 'EWR', 'icao_code': 'KEWR'},
        {'iata_code': 'SFO', 'icao_code': 'KSFO'},
    )))

    route = service.get_route(' ual839 ')

    assert (route.departure, route.arrival) == ('EWR', 'SFO')
    url, kwargs = session.calls[0]
    assert url == 'https://adsbdb.test/v0/callsign/UAL839'
    assert kwargs['timeout'] == 5.0


def test_route_falls_back_to_icao_per_leg():
    service, _ = make_service(lambda url, **kw: make_response(200, route_body(
        {'iata_code': None, 'icao_code': 'KTEB'},
        {'iata_code': 'BOS', 'icao_code': 'KBOS'},
    )))
    route = service.get_route('N123AB')
    assert (route.departure, route.arrival) == ('KTEB', 'BOS')


def test_partial_route_is_not_reported():
    service, _ = make_service(lambda url, **kw: make_response(200, route_body(
        {'iata_code': 'EWR'}, {'iata_code': None, 'icao_code': None},
    )))
    assert service.get_route('UAL839') is None


@pytest.mark.parametrize('callsign', [None, '', '   '])
def test_blank_callsign_skips_lookup(callsign):
    service, session = make_service(lambda url, **kw: pytest.fail('unexpected request'))
    assert service.get_route(callsign) is None
    assert session.calls == []


@pytest.mark.parametrize('handler', [
    lambda url, **kw: make_response(404, {'response': 'unknown callsign'}),
    lambda url, **kw: make_response(500, text='oops'),
    lambda url, **kw: make_response(200, text='<html>not json</html>'),
    lambda url, **kw: make_response(200, {'response': 'unknown callsign'}),
    lambda url, **kw: make_response(200, ['unexpected']),
])
def test_route_failures_yield_none(handler):
    service, _ = make_service(handler)
    assert service.get_route('UAL839') is None


@pytest.mark.parametrize('error', [
    requests.exceptions.ReadTimeout('slow'),
    requests.exceptions.ConnectionError('refused'),
])
def test_route_network_errors_yield_none(error):
    def handler(url, **kw):
        raise error

    service, _ = make_service(handler)
    assert service.get_route('UAL839') is None


# ---------------------------------------------------------------------------
# Aircraft type lookups
# ---------------------------------------------------------------------------

def aircraft_body(**fields):
    return {'response': {'aircraft': fields}}


def test_aircraft_type_combines_manufacturer_and_type():
    service, session = make_service(lambda url, **kw: make_response(200, aircraft_body(
        manufacturer='Boeing', type='737-824', icao_type='B738',
    )))
    assert service.get_aircraft_type('a1b2c3') == 'Boeing 737-824'
    assert session.urls() == ['https://adsbdb.test/v0/aircraft/A1B2C3']


def test_aircraft_type_without_manufacturer():
    service, _ = make_service(lambda url, **kw: make_response(200, aircraft_body(
        manufacturer=None, type='A320 214', icao_type='A320',
    )))
    assert service.get_aircraft_type('a1b2c3') == 'A320 214'


def test_aircraft_type_falls_back_to_icao_type():
    service, _ = make_service(lambda url, **kw: make_response(200, aircraft_body(
        manufacturer='Airbus', type='', icao_type='A20N',
    )))
    assert service.get_aircraft_type('a1b2c3') == 'A20N'


def test_aircraft_type_unknown():
    service, _ = make_service(lambda url, **kw: make_response(200, aircraft_body()))
    assert service.get_aircraft_type('a1b2c3') is None


def test_aircraft_type_http_error():
    service, _ = make_service(lambda url, **kw: make_response(404, {'response': 'unknown aircraft'}))
    assert service.get_aircraft_type('a1b2c3') is None


# ---------------------------------------------------------------------------
# Fan-out enrichment
# ---------------------------------------------------------------------------

def adsbdb_ok(url, **kw):
    if '/callsign/' in url:
        return make_response(200, route_body({'iata_code': 'EWR'}, {'iata_code': 'SFO'}))
    return make_response(200, aircraft_body(manufacturer='Boeing', type='737-824'))


def test_enrich_records_fills_fields():
    service, _ = make_service(adsbdb_ok)
    records = [make_record(i) for i in range(3)]

    outcome = enrich_records(records, service, stagger=0)

    assert outcome.completed == 6
    for record in records:
        assert record.departure_airport == 'EWR'
        assert record.arrival_airport == 'SFO'
        assert record.aircraft_type == 'Boeing 737-824'


def test_enrich_records_only_nearest_candidates():
    service, session = make_service(adsbdb_ok)
    records = [make_record(i) for i in range(50)]

    enrich_records(records, service, max_candidates=30, stagger=0)

    assert len(session.calls) == 60
    assert all(r.aircraft_type == 'Boeing 737-824' for r in records[:30])
    for record in records[30:]:
        assert record.departure_airport == NOT_AVAILABLE
        assert record.arrival_airport == NOT_AVAILABLE
        assert record.aircraft_type == NOT_AVAILABLE


def test_enrich_records_without_callsign_skips_route():
    service, session = make_service(adsbdb_ok)
    record = make_record(0, callsign=None)

    enrich_records([record], service, stagger=0)

    assert record.departure_airport == NOT_AVAILABLE
    assert record.aircraft_type == 'Boeing 737-824'
    assert all('/aircraft/' in url for url in session.urls())


def test_enrich_records_failures_keep_placeholders():
    def handler(url, **kw):
        raise requests.exceptions.ReadTimeout('slow')

    service, _ = make_service(handler)
    records = [make_record(i) for i in range(3)]

    enrich_records(records, service, stagger=0)

    for record in records:
        assert (record.departure_airport, record.arrival_airport, record.aircraft_type) == (
            NOT_AVAILABLE, NOT_AVAILABLE, NOT_AVAILABLE
        )


def test_enrich_records_deadline_abandons_slow_lookups():
    release = threading.Event()

    def handler(url, **kw):
        if '/aircraft/' in url:
            release.wait(5)
            return make_response(200, aircraft_body(type='late'))
        return make_response(200, route_body({'iata_code': 'EWR'}, {'iata_code': 'SFO'}))

    service, _ = make_service(handler)
    record = make_record(0)

    outcome = enrich_records([record], service, deadline=0.3, stagger=0)
    release.set()

    assert outcome.abandoned == 1
    assert record.departure_airport == 'EWR'
    assert record.aircraft_type == NOT_AVAILABLE
