"""
AirTracker Backend Package.

Live aircraft tracking service built with Flask, SQLAlchemy, and requests.

Modules:
    api/         REST endpoints for nearby aircraft, lookups and locations
    models/      SQLAlchemy ORM models (Aircraft, UserLocation)
    ingestion/   Provider adapters, fallback orchestrator and scheduler
    services/    Tracker service wiring and reverse geocoding
    proximity.py Haversine distance and tiered visibility filtering
    store.py     Upsert-based current-state store
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
