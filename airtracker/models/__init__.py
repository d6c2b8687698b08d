"""
Database models for AirTracker.

Schema priorities:
1. One current-state row per aircraft (upsert, no history)
2. Low-latency lookups by ICAO24
3. Cheap candidate scans for proximity queries
"""

from airtracker.models.base import (
    Base,
    engine,
    SessionLocal,
    init_db,
    create_db_engine,
    create_session_factory,
    utcnow,
)
from airtracker.models.aircraft import Aircraft
from airtracker.models.user_location import UserLocation

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'init_db',
    'create_db_engine',
    'create_session_factory',
    'utcnow',
    'Aircraft',
    'UserLocation',
]
