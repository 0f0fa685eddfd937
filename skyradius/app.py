"""
SkyRadius Flask Application.

Main entry point for the web application. Initializes:
- Search pipeline (OpenSky client + adsbdb enrichment)
- API routes
- CORS for browser clients

Usage:
    python -m skyradius.app

Or with gunicorn:
    gunicorn 'skyradius.app:create_app()'
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from skyradius.config import config
from skyradius.api import flights_bp
from skyradius.ingestion import FlightSearchPipeline

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(pipeline: Optional[FlightSearchPipeline] = None) -> Flask:
    """
    Application factory for Flask.

    Args:
        pipeline: Search pipeline to serve requests with. Built from
                  configuration if None; tests pass one with fake sessions.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Browser clients on any origin may call the search endpoint
    CORS(
        app,
        resources={r'/api/*': {'origins': '*'}},
        methods=['GET', 'OPTIONS'],
        allow_headers=['Content-Type'],
        supports_credentials=True,
    )

    app.register_blueprint(flights_bp)

    app.config['FLIGHT_PIPELINE'] = pipeline or FlightSearchPipeline()

    if config.opensky.is_authenticated:
        logger.info('OpenSky credentials configured')
    else:
        logger.info('No OpenSky credentials, using anonymous access')

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return jsonify({'error': 'Internal server error'}), 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting SkyRadius on http://localhost:{port}')
    logger.info(f'Search: http://localhost:{port}/api/flights?lat=40.64&lon=-73.78&radius=25')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
    )


if __name__ == '__main__':
    run_development_server()
