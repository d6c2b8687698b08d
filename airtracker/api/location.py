"""
Location API endpoints.

Provides endpoints for:
- POST /api/location/store - Store a user's location
- GET /api/location/<user_id> - Get a user's stored location
- GET /api/location/reverse/<lat>/<lon> - Reverse geocode coordinates
- POST /api/location/distance - Great-circle distance between two points
"""

import logging

from flask import Blueprint, request

from airtracker.api.helpers import get_service, now_iso, success
from airtracker.exceptions import InvalidParameters
from airtracker.proximity import haversine_distance, validate_coordinates

logger = logging.getLogger(__name__)

location_bp = Blueprint('location', __name__, url_prefix='/api/location')

KM_TO_MILES = 0.621371


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidParameters('JSON body required')
    return data


@location_bp.route('/store', methods=['POST'])
def store_location():
    """
    Store (or replace) a user's location.

    Body: {"user_id": str, "latitude": float, "longitude": float}
    """
    data = _json_body()

    user_id = data.get('user_id')
    if not user_id or not isinstance(user_id, str):
        raise InvalidParameters('user_id, latitude, and longitude are required')

    latitude, longitude = validate_coordinates(data.get('latitude'), data.get('longitude'))

    location = get_service().location_store.save(user_id, latitude, longitude)
    logger.info(f'Stored location for {user_id}')

    result = location.to_dict()
    result['message'] = 'Location stored successfully'
    return success(result)


@location_bp.route('/<user_id>', methods=['GET'])
def get_location(user_id: str):
    """Get the stored location for a user."""
    location = get_service().location_store.get(user_id)
    return success(location.to_dict())


@location_bp.route('/reverse/<lat>/<lon>', methods=['GET'])
def reverse_geocode(lat: str, lon: str):
    """
    Address for a coordinate pair.

    Falls back to a coordinates-only address if the lookup fails.
    """
    latitude, longitude = validate_coordinates(lat, lon)

    result = get_service().geocoder.reverse(latitude, longitude)
    return success(result.to_dict())


@location_bp.route('/distance', methods=['POST'])
def calculate_distance():
    """
    Distance between two points.

    Body: {"lat1": float, "lon1": float, "lat2": float, "lon2": float}
    """
    data = _json_body()

    lat1, lon1 = validate_coordinates(data.get('lat1'), data.get('lon1'))
    lat2, lon2 = validate_coordinates(data.get('lat2'), data.get('lon2'))

    distance = haversine_distance(lat1, lon1, lat2, lon2)

    return success({
        'point1': {'latitude': lat1, 'longitude': lon1},
        'point2': {'latitude': lat2, 'longitude': lon2},
        'distance_km': round(distance, 2),
        'distance_miles': round(distance * KM_TO_MILES, 2),
        'timestamp': now_iso(),
    })
