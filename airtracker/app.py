"""
AirTracker Flask Application.

Builds the HTTP service:
- Database schema (when no service is injected)
- Tracker service (stores, provider fallback chain, proximity engine)
- Background aircraft updates
- API routes and JSON error handlers

Usage:
    python -m airtracker.app

Or with gunicorn:
    gunicorn 'airtracker.app:create_app()'
"""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from airtracker.api import aircraft_bp, location_bp
from airtracker.api.helpers import error
from airtracker.config import config
from airtracker.exceptions import AirTrackerError, StorageError
from airtracker.models import init_db
from airtracker.services.tracker import TrackerService

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    service: Optional[TrackerService] = None,
    start_ingestion: bool = True,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        service: Pre-built tracker service. Built from configuration
                 (and the schema created) if None.
        start_ingestion: Whether to start the background aircraft
                        updates. Set to False for testing.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    if service is None:
        logger.info('Initializing database...')
        init_db()
        service = TrackerService.from_config()

    app.config['TRACKER_SERVICE'] = service

    # Register API blueprints
    app.register_blueprint(aircraft_bp)
    app.register_blueprint(location_bp)

    if start_ingestion:
        service.start()

    @app.route('/health')
    def health():
        """Health check with ingestion status."""
        return {'status': 'ok', 'ingestion': service.scheduler.stats}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(StorageError)
    def storage_error(e: StorageError):
        logger.error(f'Storage error: {e.message}')
        return error(e.title, e.message, e.status_code)

    @app.errorhandler(AirTrackerError)
    def tracker_error(e: AirTrackerError):
        return error(e.title, e.message, e.status_code)

    @app.errorhandler(404)
    def not_found(e):
        return error('Not found', 'The requested resource does not exist', 404)

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return error('Internal server error', 'An unexpected error occurred', 500)

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    logger.info(f'Starting AirTracker on http://localhost:{config.port}')

    app.run(
        host='0.0.0.0',
        port=config.port,
        debug=config.debug,
        use_reloader=False,  # Reloader would start a second scheduler
    )


if __name__ == '__main__':
    run_development_server()
