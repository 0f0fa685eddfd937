"""
Flight search API endpoint.

Provides:
- GET /api/flights?lat=<float>&lon=<float>&radius=<miles>

Response codes:
- 200: {timestamp, count, flights[]} once OpenSky data was obtained,
       however much enrichment completed
- 400: missing or non-numeric parameters
- 503: OpenSky timed out on every attempt (Retry-After header set)
- OpenSky's status: OpenSky answered with an error
- 500: anything unexpected
"""

import logging
import math
import time
from typing import Mapping, Tuple

from flask import Blueprint, current_app, jsonify, request

from skyradius.config import config
from skyradius.errors import InvalidSearchParams, OpenSkyHTTPError, OpenSkyUnavailable

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api/flights')

REQUIRED_PARAMS = ('lat', 'lon', 'radius')


def parse_search_params(args: Mapping[str, str]) -> Tuple[float, float, float]:
    """
    Parse lat/lon/radius query parameters.

    Raises InvalidSearchParams if any is missing, empty, non-numeric,
    or not finite.
    """
    raw = [args.get(name) for name in REQUIRED_PARAMS]
    if any(value is None or not value.strip() for value in raw):
        raise InvalidSearchParams('Missing required parameters: lat, lon, radius')

    try:
        values = [float(value) for value in raw]
    except ValueError:
        raise InvalidSearchParams('Invalid parameter values')

    if not all(math.isfinite(v) for v in values):
        raise InvalidSearchParams('Invalid parameter values')

    lat, lon, radius = values
    return lat, lon, radius


@flights_bp.route('', methods=['GET', 'OPTIONS'])
def search_flights():
    """
    List aircraft within a radius of a point, nearest first.

    Query parameters:
    - lat: center latitude (degrees)
    - lon: center longitude (degrees)
    - radius: search radius (statute miles)
    """
    if request.method == 'OPTIONS':
        return '', 200

    try:
        lat, lon, radius = parse_search_params(request.args)
    except InvalidSearchParams as e:
        return jsonify({'error': str(e)}), 400

    pipeline = current_app.config['FLIGHT_PIPELINE']

    try:
        result = pipeline.search(lat, lon, radius)

    except OpenSkyUnavailable as e:
        retry_after = config.opensky.retry_after_seconds
        logger.error(f'OpenSky unavailable: {e}')
        response = jsonify({
            'error': 'Flight data service temporarily unavailable',
            'details': f'OpenSky did not respond after {e.attempts} attempts',
            'code': 'OPENSKY_TIMEOUT',
            'retryAfter': retry_after,
            'timestamp': int(time.time()),
        })
        response.headers['Retry-After'] = str(retry_after)
        return response, 503

    except OpenSkyHTTPError as e:
        return jsonify({
            'error': 'Failed to fetch flight data',
            'details': e.details,
        }), e.status_code

    except Exception:
        logger.exception('Error fetching flight data')
        return jsonify({'error': 'Internal server error'}), 500

    return jsonify(result.to_dict())
