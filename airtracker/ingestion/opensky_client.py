"""
OpenSky Network API client.

Free worldwide state-vector feed; no key required, optional basic auth
for higher rate limits. Responses carry positional arrays.

OpenSky state vector format (array indices):
0: icao24          - ICAO24 hex address
1: callsign        - Callsign (8 chars max)
2: origin_country  - Country of registration
3: time_position   - Unix timestamp of last position update
4: last_contact    - Unix timestamp of last message
5: longitude       - WGS84 longitude
6: latitude        - WGS84 latitude
7: baro_altitude   - Barometric altitude (meters)
8: on_ground       - Boolean
9: velocity        - Ground speed (m/s)
10: true_track     - Track angle (degrees, 0=north)
11: vertical_rate  - Vertical rate (m/s)
12: sensors        - Sensor IDs (array)
13: geo_altitude   - Geometric altitude (meters)
14: squawk         - Transponder code
15: spi            - Special position indicator
16: position_source - 0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM
17: category       - Aircraft category (only with extended=1)
"""

import logging
from typing import Any, List, Optional

import requests
from requests.auth import HTTPBasicAuth

from airtracker.config import config
from airtracker.exceptions import ProviderUnavailable
from airtracker.ingestion.base import ProviderAdapter, RawObservation, Timeout

logger = logging.getLogger(__name__)

STATE_VECTOR_FIELDS = 17


def parse_state_vector(arr: List[Any]) -> Optional[RawObservation]:
    """
    Map an OpenSky state vector array onto a RawObservation.

    Returns None if the array is too short to be a state vector.
    Missing values stay None; validation is the normalizer's job.
    """
    if not isinstance(arr, (list, tuple)) or len(arr) < STATE_VECTOR_FIELDS:
        return None

    sensors = arr[12]
    if sensors:
        sensors = ','.join(str(s) for s in sensors)

    return RawObservation(
        icao24=arr[0],
        callsign=arr[1],
        origin_country=arr[2],
        time_position=arr[3],
        last_contact=arr[4],
        longitude=arr[5],
        latitude=arr[6],
        altitude=arr[7],
        on_ground=arr[8],
        velocity=arr[9],
        true_track=arr[10],
        vertical_rate=arr[11],
        sensors=sensors or None,
        geo_altitude=arr[13],
        squawk=arr[14],
        spi=arr[15],
        position_source=arr[16],
        category=arr[17] if len(arr) > STATE_VECTOR_FIELDS else None,
    )


class OpenSkyClient(ProviderAdapter):
    """
    Client for the OpenSky /states/all endpoint.

    Queries the whole world in one request; the proximity engine does
    the geographic filtering at query time.
    """

    name = 'opensky'

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        base_url: str = 'https://opensky-network.org/api',
        timeout: Timeout = 10.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(timeout=timeout, session=session)
        self.base_url = base_url.rstrip('/')
        self.auth = None
        if username and password:
            self.auth = HTTPBasicAuth(username, password)
            logger.info('OpenSky client initialized with authentication')
        else:
            logger.info('OpenSky client running without authentication (lower rate limits)')

    @classmethod
    def from_config(cls, timeout: Optional[Timeout] = None) -> 'OpenSkyClient':
        """Create client from application configuration."""
        return cls(
            # Partial credentials would only earn a 401
            username=config.opensky.username if config.opensky.is_authenticated else None,
            password=config.opensky.password if config.opensky.is_authenticated else None,
            base_url=config.opensky.base_url,
            timeout=timeout or config.ingestion.provider_timeout,
        )

    def fetch(self) -> List[RawObservation]:
        """
        Fetch current state vectors worldwide.

        Returns an empty list when OpenSky answers with "states": null.

        Raises:
            ProviderUnavailable on timeout, transport or HTTP errors, or
            when the body is not a state-vector document
        """
        data = self._get_json(
            f'{self.base_url}/states/all',
            params={'extended': 1},
            auth=self.auth,
        )

        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, 'unexpected response shape')

        states_raw = data.get('states')
        if states_raw is None:
            states_raw = []
        elif not isinstance(states_raw, list):
            raise ProviderUnavailable(self.name, 'unexpected response shape')

        logger.info(f'Received {len(states_raw)} state vectors from OpenSky')

        observations = []
        for arr in states_raw:
            try:
                observation = parse_state_vector(arr)
            except (TypeError, ValueError):
                observation = None
            if observation is not None:
                observations.append(observation)

        skipped = len(states_raw) - len(observations)
        if skipped:
            logger.debug(f'Skipped {skipped} malformed state vectors')

        return observations
