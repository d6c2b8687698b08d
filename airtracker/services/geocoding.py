"""
Reverse geocoding service - turns coordinates into a readable address.

Stateless pass-through to OpenStreetMap Nominatim. When the lookup
fails for any reason the caller still gets an answer: a literal
"Lat: x, Lon: y" address with the place fields left empty.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional

import requests

from airtracker.config import config

logger = logging.getLogger(__name__)


@dataclass
class ReverseGeocodeResult:
    """Address information for a coordinate pair."""
    latitude: float
    longitude: float
    address: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None

    def to_dict(self) -> dict:
        result = asdict(self)
        result['coordinates'] = {
            'latitude': result.pop('latitude'),
            'longitude': result.pop('longitude'),
        }
        return result


def fallback_result(latitude: float, longitude: float) -> ReverseGeocodeResult:
    """Coordinates-only result used when the lookup is unavailable."""
    return ReverseGeocodeResult(
        latitude=latitude,
        longitude=longitude,
        address=f'Lat: {latitude:.6f}, Lon: {longitude:.6f}',
    )


class ReverseGeocoder:
    """Client for the Nominatim /reverse endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or config.geocoding.base_url).rstrip('/')
        self.timeout = timeout or config.geocoding.timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault('User-Agent', config.geocoding.user_agent)

    def reverse(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        """Look up the address for a coordinate pair, never raising."""
        params = {
            'format': 'json',
            'lat': latitude,
            'lon': longitude,
            'zoom': 10,
            'addressdetails': 1,
        }

        try:
            response = self.session.get(
                f'{self.base_url}/reverse',
                params=params,
                timeout=self.timeout,
            )
            if response.status_code != 200:
                logger.warning(f'Reverse geocoding error: {response.status_code}')
                return fallback_result(latitude, longitude)
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f'Reverse geocoding failed: {e}')
            return fallback_result(latitude, longitude)

        if not isinstance(data, dict) or not data.get('display_name'):
            logger.debug(f'No address found for ({latitude}, {longitude})')
            return fallback_result(latitude, longitude)

        address = data.get('address') or {}
        country_code = address.get('country_code')

        return ReverseGeocodeResult(
            latitude=latitude,
            longitude=longitude,
            address=data['display_name'],
            city=address.get('city') or address.get('town') or address.get('village'),
            state=address.get('state'),
            country=address.get('country'),
            country_code=country_code.upper() if country_code else None,
        )
