"""
Provider adapter contract.

Every adapter wraps one external aviation data source and returns a
list of RawObservation objects, or raises ProviderUnavailable. Adapters
own their wire-format quirks; the observations they return share the
field names of the Aircraft record so the normalizer never needs to
know which provider produced them.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

import requests

from airtracker.exceptions import ProviderUnavailable

logger = logging.getLogger(__name__)

USER_AGENT = 'AirplaneTracker/1.0'

Timeout = Union[float, Tuple[float, float]]

CHUNK_SIZE = 64 * 1024


def overall_timeout(timeout: Timeout) -> float:
    """
    Budget for a whole request.

    requests applies its timeout per socket wait (connect, then each
    read), so a server trickling bytes could otherwise hold a fetch open
    indefinitely. The body read is additionally bounded by this total.
    """
    if isinstance(timeout, tuple):
        return sum(timeout)
    return timeout


@dataclass
class RawObservation:
    """
    Provider-agnostic aircraft observation, before validation.

    Any field may be None if the provider did not report it.
    """
    icao24: Optional[str]
    callsign: Optional[str] = None
    origin_country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    on_ground: Optional[bool] = None
    velocity: Optional[float] = None
    true_track: Optional[float] = None
    vertical_rate: Optional[float] = None
    geo_altitude: Optional[float] = None
    squawk: Optional[str] = None
    spi: Optional[bool] = None
    position_source: Optional[int] = None
    sensors: Optional[str] = None
    category: Optional[int] = None
    time_position: Optional[int] = None
    last_contact: Optional[int] = None


class ProviderAdapter:
    """
    Base class for provider adapters.

    Subclasses set `name` and implement fetch(). The shared _get_json()
    applies the per-phase timeout plus an overall deadline and maps every
    transport problem onto ProviderUnavailable.
    """

    name = 'provider'

    def __init__(
        self,
        timeout: Timeout = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault('User-Agent', USER_AGENT)

    def fetch(self) -> List[RawObservation]:
        """Fetch current observations. Raises ProviderUnavailable."""
        raise NotImplementedError

    def _get_json(self, url: str, params: Optional[dict] = None, auth=None) -> Any:
        """GET a JSON document, raising ProviderUnavailable on any failure."""
        logger.debug(f'{self.name}: GET {url}')

        deadline = time.monotonic() + overall_timeout(self.timeout)

        try:
            response = self.session.get(
                url,
                params=params,
                auth=auth,
                timeout=self.timeout,
                stream=True,
            )
            try:
                response.raise_for_status()
                body = self._read_body(response, deadline)
            finally:
                response.close()
            return json.loads(body)

        except requests.exceptions.Timeout as e:
            logger.warning(f'{self.name} API timeout')
            raise ProviderUnavailable(self.name, 'request timed out') from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 429:
                logger.warning(f'{self.name} rate limit exceeded')
            else:
                logger.warning(f'{self.name} API error: {status}')
            raise ProviderUnavailable(self.name, f'HTTP {status}', status_code=status) from e
        except requests.exceptions.RequestException as e:
            logger.warning(f'{self.name} request failed: {e}')
            raise ProviderUnavailable(self.name, str(e)) from e
        except ValueError as e:
            # Body was not valid JSON
            logger.warning(f'{self.name} returned an undecodable body: {e}')
            raise ProviderUnavailable(self.name, 'invalid JSON response') from e

    def _read_body(self, response: requests.Response, deadline: float) -> bytes:
        body = bytearray()
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            body.extend(chunk)
            if time.monotonic() > deadline:
                logger.warning(f'{self.name} response exceeded overall timeout')
                raise ProviderUnavailable(self.name, 'request timed out')
        return bytes(body)

    def close(self) -> None:
        self.session.close()

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.name}>'
