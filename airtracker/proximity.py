"""
Proximity engine - which aircraft are plausibly visible from a point.

Query flow:
1. Snapshot the flying candidates from the store (no locking; staleness
   of up to one polling interval is acceptable)
2. Compute great-circle distance to each candidate
3. Keep candidates that pass any visibility tier
4. Sort by distance, closest first

The tiers widen inclusion past the literal radius because real sky
visibility depends on altitude, not just ground distance. The thresholds
are product constants, kept as literals.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from airtracker.config import config
from airtracker.exceptions import InvalidCoordinates, InvalidParameters
from airtracker.models import Aircraft
from airtracker.store import AircraftStore

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

DEFAULT_RADIUS_KM = 100.0

# Visibility tiers
LOCAL_VISIBILITY_KM = 200.0
HIGH_ALTITUDE_M = 10500.0        # ~35,000 ft
HIGH_ALTITUDE_RANGE_KM = 400.0
RADIUS_MARGIN = 2.0
MODERATE_ALTITUDE_M = 8000.0
MODERATE_ALTITUDE_RANGE_KM = 300.0


def haversine_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points in kilometers.

    Uses the Haversine formula for accuracy over short to medium distances.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def is_visible(distance_km: float, altitude_m: Optional[float], radius_km: float) -> bool:
    """
    Tiered visibility test. An aircraft is included if ANY tier matches.

    Unknown altitude never satisfies an altitude tier.
    """
    altitude = altitude_m if altitude_m is not None else float('-inf')

    # Within the requested radius
    if distance_km <= radius_km:
        return True

    # Default local visibility bound
    if distance_km <= LOCAL_VISIBILITY_KM:
        return True

    # Very high flyers are visible from farther away
    if altitude > HIGH_ALTITUDE_M and distance_km <= HIGH_ALTITUDE_RANGE_KM:
        return True

    # Loose margin around the requested radius
    if distance_km <= radius_km * RADIUS_MARGIN:
        return True

    # High and moderately close
    if altitude > MODERATE_ALTITUDE_M and distance_km <= MODERATE_ALTITUDE_RANGE_KM:
        return True

    return False


def _parse_number(name: str, value: Any) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidParameters(f'{name} is required')
    if isinstance(value, bool):
        raise InvalidParameters(f'{name} must be a valid number')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidParameters(f'{name} must be a valid number') from None
    if not math.isfinite(number):
        raise InvalidParameters(f'{name} must be a valid number')
    return number


def validate_coordinates(latitude: Any, longitude: Any) -> Tuple[float, float]:
    """
    Parse a latitude/longitude pair.

    Raises:
        InvalidParameters if either value is missing or non-numeric
        InvalidCoordinates if either value is out of range
    """
    lat = _parse_number('latitude', latitude)
    lon = _parse_number('longitude', longitude)

    if not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
        raise InvalidCoordinates(
            'Latitude must be between -90 and 90, longitude between -180 and 180'
        )
    return lat, lon


def validate_query(
    latitude: Any,
    longitude: Any,
    radius_km: Any = None,
) -> Tuple[float, float, float]:
    """
    Parse nearby-query parameters. Radius defaults to 100 km.

    Raises:
        InvalidParameters for missing/non-numeric values or radius <= 0
        InvalidCoordinates for out-of-range coordinates
    """
    lat, lon = validate_coordinates(latitude, longitude)

    if radius_km is None or (isinstance(radius_km, str) and not radius_km.strip()):
        radius = DEFAULT_RADIUS_KM
    else:
        radius = _parse_number('radius', radius_km)
        if radius <= 0:
            raise InvalidParameters('radius must be greater than zero')

    return lat, lon, radius


@dataclass
class NearbyAircraft:
    """An aircraft together with its distance from the query point."""
    aircraft: Aircraft
    distance_km: float

    def to_dict(self) -> dict:
        """API representation, distance rounded to 2 decimals."""
        result = self.aircraft.to_dict()
        result['distance_km'] = round(self.distance_km, 2)
        return result


class ProximityEngine:
    """Answers nearby-aircraft queries against the store's snapshot."""

    def __init__(
        self,
        store: AircraftStore,
        candidate_limit: Optional[int] = None,
    ):
        self.store = store
        self.candidate_limit = candidate_limit or config.ingestion.candidate_limit

    def nearby(
        self,
        latitude: float,
        longitude: float,
        radius_km: float = DEFAULT_RADIUS_KM,
    ) -> List[NearbyAircraft]:
        """
        Aircraft plausibly visible from (latitude, longitude), closest first.

        Raises:
            StorageError if the candidate scan fails
        """
        candidates = self.store.scan_flying(limit=self.candidate_limit)

        visible = []
        for aircraft in candidates:
            if not aircraft.has_position:
                continue
            distance_km = haversine_distance(
                latitude, longitude,
                aircraft.latitude, aircraft.longitude,
            )
            if is_visible(distance_km, aircraft.altitude, radius_km):
                visible.append(NearbyAircraft(aircraft, distance_km))

        visible.sort(key=lambda x: x.distance_km)

        logger.debug(
            f'Found {len(visible)} potentially visible aircraft out of '
            f'{len(candidates)} candidates near ({latitude:.4f}, {longitude:.4f})'
        )
        return visible
