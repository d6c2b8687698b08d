"""
Tracker service - the handle that wires the engine together.

Constructed with explicit dependencies (stores, ordered adapters,
polling interval) and handed to the scheduler and the HTTP layer, so
tests can swap in fake adapters or a throwaway database.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy.orm import sessionmaker

from airtracker.config import config
from airtracker.ingestion import (
    FetchOrchestrator,
    IngestionScheduler,
    ProviderAdapter,
    build_adapters,
)
from airtracker.proximity import ProximityEngine
from airtracker.services.geocoding import ReverseGeocoder
from airtracker.store import AircraftStore, UserLocationStore

logger = logging.getLogger(__name__)


class TrackerService:
    """Owns the store, the ingestion loop and the proximity engine."""

    def __init__(
        self,
        aircraft_store: AircraftStore,
        adapters: Sequence[ProviderAdapter],
        location_store: Optional[UserLocationStore] = None,
        geocoder: Optional[ReverseGeocoder] = None,
        interval: Optional[float] = None,
        candidate_limit: Optional[int] = None,
    ):
        self.aircraft_store = aircraft_store
        self.location_store = location_store or UserLocationStore(aircraft_store.session_factory)
        self.geocoder = geocoder or ReverseGeocoder()

        self.orchestrator = FetchOrchestrator(adapters, aircraft_store)
        self.scheduler = IngestionScheduler(self.orchestrator, interval=interval)
        self.proximity = ProximityEngine(aircraft_store, candidate_limit=candidate_limit)

    @classmethod
    def from_config(
        cls,
        session_factory: Optional[sessionmaker] = None,
        adapters: Optional[Sequence[ProviderAdapter]] = None,
    ) -> 'TrackerService':
        """Create a service from application configuration."""
        store = AircraftStore(session_factory)
        return cls(
            aircraft_store=store,
            adapters=build_adapters() if adapters is None else adapters,
            location_store=UserLocationStore(store.session_factory),
            interval=config.ingestion.update_interval,
            candidate_limit=config.ingestion.candidate_limit,
        )

    def start(self) -> None:
        """Start periodic aircraft updates (one immediate fetch first)."""
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()
        for adapter in self.orchestrator.adapters:
            adapter.close()
