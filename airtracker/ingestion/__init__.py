"""
Data ingestion module for AirTracker.

Polls external aviation data providers with fallback, normalizes their
observations and upserts them into the current-state table.
"""

from airtracker.ingestion.base import ProviderAdapter, RawObservation
from airtracker.ingestion.opensky_client import OpenSkyClient
from airtracker.ingestion.aviationstack_client import AviationStackClient
from airtracker.ingestion.pipeline import FetchOrchestrator, FetchOutcome, FetchStatus
from airtracker.ingestion.providers import build_adapters
from airtracker.ingestion.scheduler import IngestionScheduler, SchedulerState

__all__ = [
    'ProviderAdapter',
    'RawObservation',
    'OpenSkyClient',
    'AviationStackClient',
    'FetchOrchestrator',
    'FetchOutcome',
    'FetchStatus',
    'build_adapters',
    'IngestionScheduler',
    'SchedulerState',
]
