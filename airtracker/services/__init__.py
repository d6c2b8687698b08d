"""
External integration services.

Handles third-party API calls with graceful degradation when the
services are unavailable.
"""

from airtracker.services.geocoding import ReverseGeocoder, ReverseGeocodeResult
from airtracker.services.tracker import TrackerService

__all__ = ['ReverseGeocoder', 'ReverseGeocodeResult', 'TrackerService']
