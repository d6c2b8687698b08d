"""
Exception hierarchy for AirTracker.

Each exception carries the HTTP status and short title the API layer
uses when the error reaches a caller:
- Provider errors (never surfaced; the orchestrator falls back)
- Request validation errors (400)
- Lookup misses (404)
- Storage failures (500)
"""

from typing import Optional


class AirTrackerError(Exception):
    """Base exception for all AirTracker errors."""

    status_code = 500
    title = 'Internal server error'

    def __init__(self, message: str, *args):
        self.message = message
        super().__init__(message, *args)


class ConfigurationError(AirTrackerError):
    """Invalid startup configuration (e.g. unknown provider name)."""
    pass


# =============================================================================
# Provider Exceptions
# =============================================================================

class ProviderUnavailable(AirTrackerError):
    """A data provider timed out, failed in transport, or answered non-2xx."""

    title = 'Provider unavailable'

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.http_status = status_code
        super().__init__(f'{provider}: {message}')


# =============================================================================
# Request Exceptions
# =============================================================================

class InvalidParameters(AirTrackerError):
    """Missing or non-numeric request parameters."""

    status_code = 400
    title = 'Invalid parameters'


class InvalidCoordinates(InvalidParameters):
    """Latitude or longitude outside the WGS-84 range."""

    title = 'Invalid coordinates'


class NotFound(AirTrackerError):
    """Base exception for lookups with no matching row."""

    status_code = 404
    title = 'Not found'


class AircraftNotFound(NotFound):
    """No aircraft stored under the requested icao24."""

    title = 'Aircraft not found'

    def __init__(self, icao24: str):
        self.icao24 = icao24
        super().__init__(f'No aircraft found with ICAO24: {icao24}')


class LocationNotFound(NotFound):
    """No location stored for the requested user."""

    title = 'Location not found'

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f'No location found for user: {user_id}')


# =============================================================================
# Storage Exceptions
# =============================================================================

class StorageError(AirTrackerError):
    """A database read or write failed."""

    title = 'Database error'
