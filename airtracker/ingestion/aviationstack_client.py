"""
AviationStack API client.

Keyed commercial flight-data feed, used as a fallback when the free
feed is down or empty. Responses are nested objects:

    {"data": [{"flight": {...}, "airline": {...}, "aircraft": {...},
               "live": {...}, "flight_status": "active"}, ...]}

Only flights with a "live" block carry a position; the rest come back
without coordinates and are dropped by the normalizer.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from airtracker.config import config
from airtracker.exceptions import ProviderUnavailable
from airtracker.ingestion.base import ProviderAdapter, RawObservation, Timeout

logger = logging.getLogger(__name__)

KMH_TO_MS = 1 / 3.6


def _section(flight: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Nested object or {} when the API sends null."""
    value = flight.get(key)
    return value if isinstance(value, dict) else {}


def parse_flight(flight: Dict[str, Any]) -> Optional[RawObservation]:
    """Map one AviationStack flight object onto a RawObservation."""
    if not isinstance(flight, dict):
        return None

    info = _section(flight, 'flight')
    airline = _section(flight, 'airline')
    aircraft = _section(flight, 'aircraft')
    live = _section(flight, 'live')

    speed_kmh = live.get('speed_horizontal')
    velocity = speed_kmh * KMH_TO_MS if speed_kmh is not None else None

    # Without live telemetry the status is the only ground indicator
    on_ground = live.get('is_ground')
    if on_ground is None:
        on_ground = flight.get('flight_status') == 'landed'

    return RawObservation(
        icao24=aircraft.get('icao24'),
        callsign=info.get('icao') or info.get('iata'),
        origin_country=airline.get('country'),
        latitude=live.get('latitude'),
        longitude=live.get('longitude'),
        altitude=live.get('altitude'),
        on_ground=on_ground,
        velocity=velocity,
        true_track=live.get('direction'),
    )


class AviationStackClient(ProviderAdapter):
    """Client for the AviationStack /flights endpoint."""

    name = 'aviationstack'

    def __init__(
        self,
        api_key: str,
        base_url: str = 'http://api.aviationstack.com/v1',
        limit: int = 100,
        timeout: Timeout = 10.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(timeout=timeout, session=session)
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.limit = limit

    @classmethod
    def from_config(cls, timeout: Optional[Timeout] = None) -> 'AviationStackClient':
        """Create client from application configuration."""
        return cls(
            api_key=config.aviationstack.api_key,
            base_url=config.aviationstack.base_url,
            limit=config.aviationstack.limit,
            timeout=timeout or config.ingestion.provider_timeout,
        )

    def fetch(self) -> List[RawObservation]:
        """
        Fetch live flights.

        Raises:
            ProviderUnavailable on transport/HTTP errors, or when the API
            reports an error inside a 200 response (bad key, quota)
        """
        data = self._get_json(
            f'{self.base_url}/flights',
            params={'access_key': self.api_key, 'limit': self.limit},
        )

        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, 'unexpected response shape')

        if data.get('error'):
            error = data['error']
            message = error.get('message') if isinstance(error, dict) else str(error)
            logger.warning(f'AviationStack API error: {message}')
            raise ProviderUnavailable(self.name, message or 'API error')

        flights = data.get('data') or []
        if not isinstance(flights, list):
            raise ProviderUnavailable(self.name, 'unexpected response shape')

        logger.info(f'Received {len(flights)} flights from AviationStack')

        observations = []
        for flight in flights:
            try:
                observation = parse_flight(flight)
            except (TypeError, ValueError):
                logger.debug(f'Skipped malformed AviationStack flight: {flight!r:.200}')
                continue
            if observation is not None:
                observations.append(observation)

        return observations
