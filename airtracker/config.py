"""
Configuration management for AirTracker.

Settings come from environment variables (a local .env is read first)
and are frozen at import. Provider order, polling interval and query
bounds all live here.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()


def _parse_list(value: str) -> Tuple[str, ...]:
    """Parse 'a,b,c' into a tuple of lower-case names, dropping blanks."""
    return tuple(
        item.strip().lower()
        for item in value.split(',')
        if item.strip()
    )


@dataclass(frozen=True)
class OpenSkyConfig:
    """OpenSky Network (free state-vector feed) configuration."""
    username: Optional[str] = os.getenv('OPENSKY_USERNAME') or None
    password: Optional[str] = os.getenv('OPENSKY_PASSWORD') or None
    base_url: str = os.getenv('OPENSKY_BASE_URL', 'https://opensky-network.org/api')

    @property
    def is_authenticated(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class AviationStackConfig:
    """AviationStack (keyed commercial feed) configuration."""
    api_key: Optional[str] = os.getenv('AVIATION_API_KEY') or None
    base_url: str = os.getenv('AVIATION_API_BASE_URL', 'http://api.aviationstack.com/v1')
    limit: int = int(os.getenv('AVIATION_API_LIMIT', '100'))

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///airtracker.db')


@dataclass(frozen=True)
class IngestionConfig:
    """Data ingestion and query settings."""
    # Priority order: first provider that returns data wins the cycle
    providers: Tuple[str, ...] = _parse_list(
        os.getenv('AIRCRAFT_PROVIDERS', 'opensky,aviationstack')
    )
    update_interval: int = int(os.getenv('AIRCRAFT_UPDATE_INTERVAL', '30'))
    provider_timeout: float = float(os.getenv('PROVIDER_TIMEOUT_SECONDS', '10'))

    # Cost control for proximity scans and the bulk listing endpoint
    candidate_limit: int = int(os.getenv('CANDIDATE_LIMIT', '1000'))
    listing_limit: int = 100


@dataclass(frozen=True)
class GeocodingConfig:
    """Reverse geocoding (OpenStreetMap Nominatim) settings."""
    base_url: str = os.getenv('GEOCODING_BASE_URL', 'https://nominatim.openstreetmap.org')
    timeout: float = float(os.getenv('GEOCODING_TIMEOUT_SECONDS', '5'))
    user_agent: str = 'AirplaneTracker/1.0'


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    opensky: OpenSkyConfig
    aviationstack: AviationStackConfig
    database: DatabaseConfig
    ingestion: IngestionConfig
    geocoding: GeocodingConfig

    # Flask settings
    debug: bool
    port: int


def load_config() -> AppConfig:
    """Load all configuration."""
    return AppConfig(
        opensky=OpenSkyConfig(),
        aviationstack=AviationStackConfig(),
        database=DatabaseConfig(),
        ingestion=IngestionConfig(),
        geocoding=GeocodingConfig(),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
        port=int(os.getenv('PORT', '5000')),
    )


# Singleton instance
config = load_config()
