"""
API module for AirTracker.

Provides REST endpoints for:
- Aircraft data (nearby queries, listings, single lookups, statistics)
- User locations and coordinate helpers
"""

from airtracker.api.aircraft import aircraft_bp
from airtracker.api.location import location_bp

__all__ = ['aircraft_bp', 'location_bp']
