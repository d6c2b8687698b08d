"""
Aircraft API endpoints.

Provides endpoints for:
- GET /api/aircraft/nearby - Aircraft plausibly visible from a point
- GET /api/aircraft/all - Most recently updated airborne aircraft
- GET /api/aircraft/<icao24> - Single aircraft by transponder address
- GET /api/aircraft/stats/overview - Aggregate counts
"""

import logging
import time

from flask import Blueprint, request

from airtracker.api.helpers import get_service, now_iso, success
from airtracker.config import config
from airtracker.exceptions import InvalidParameters
from airtracker.proximity import validate_query

logger = logging.getLogger(__name__)

aircraft_bp = Blueprint('aircraft', __name__, url_prefix='/api/aircraft')

MAX_LISTING_LIMIT = 1000


@aircraft_bp.route('/nearby', methods=['GET'])
def nearby_aircraft():
    """
    Aircraft near a location, closest first.

    Query parameters:
    - lat: float, required, -90..90
    - lon: float, required, -180..180
    - radius: float, search radius in km (default 100)

    The result may include aircraft beyond the radius when altitude
    makes them visible from farther away.
    """
    start_time = time.perf_counter()

    latitude, longitude, radius_km = validate_query(
        request.args.get('lat'),
        request.args.get('lon'),
        request.args.get('radius'),
    )

    results = get_service().proximity.nearby(latitude, longitude, radius_km)
    aircraft = [r.to_dict() for r in results]

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return success({
        'aircraft': aircraft,
        'user_location': {'latitude': latitude, 'longitude': longitude},
        'search_radius_km': radius_km,
        'count': len(aircraft),
        'timestamp': now_iso(),
        'query_time_ms': round(query_time_ms, 2),
    })


@aircraft_bp.route('/all', methods=['GET'])
def list_aircraft():
    """
    Most recently updated airborne aircraft.

    Query parameters:
    - limit: int, max results to return (default 100, max 1000)
    """
    raw_limit = request.args.get('limit')
    if raw_limit is None:
        limit = config.ingestion.listing_limit
    else:
        try:
            limit = int(raw_limit)
        except ValueError:
            raise InvalidParameters('limit must be an integer') from None
        if limit <= 0:
            raise InvalidParameters('limit must be greater than zero')
        limit = min(limit, MAX_LISTING_LIMIT)

    aircraft = get_service().aircraft_store.list_airborne(limit=limit)

    return success({
        'aircraft': [a.to_dict() for a in aircraft],
        'count': len(aircraft),
        'timestamp': now_iso(),
    })


@aircraft_bp.route('/stats/overview', methods=['GET'])
def stats_overview():
    """Total, airborne, on-ground, recently updated and per-country counts."""
    stats = get_service().aircraft_store.stats()

    return success({
        'stats': stats,
        'timestamp': now_iso(),
    })


@aircraft_bp.route('/<icao24>', methods=['GET'])
def get_aircraft(icao24: str):
    """Get a single aircraft by ICAO24 address (case-insensitive)."""
    aircraft = get_service().aircraft_store.get(icao24)

    return success({
        'aircraft': aircraft.to_dict(),
        'timestamp': now_iso(),
    })
