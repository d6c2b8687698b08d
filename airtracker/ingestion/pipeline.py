"""
Ingestion pipeline - orchestrates data flow from providers to the store.

One cycle:
1. Fetch: ask providers in priority order until one returns data
2. Normalize: drop unusable observations, map onto Aircraft rows
3. Upsert: overwrite the current state table

Only one provider's results are committed per cycle. Providers have
independent rate limits and outages, so falling back keeps data fresh
without merging conflicting simultaneous sources.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from airtracker.exceptions import ProviderUnavailable
from airtracker.ingestion.base import ProviderAdapter
from airtracker.ingestion.normalizer import normalize_batch
from airtracker.models import utcnow
from airtracker.store import AircraftStore

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    """Result of one ingestion cycle."""
    UPDATED = 'updated'
    NO_DATA = 'no_data'


@dataclass(frozen=True)
class FetchOutcome:
    """What one cycle did: which provider was committed and how many rows."""
    status: FetchStatus
    provider_used: Optional[str] = None
    count: int = 0

    @property
    def no_data(self) -> bool:
        return self.status is FetchStatus.NO_DATA

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'provider_used': self.provider_used,
            'count': self.count,
        }


class FetchOrchestrator:
    """
    Tries adapters in fixed priority order and commits the first
    non-empty result.

    A failing or empty adapter is logged and skipped. If every adapter
    comes back empty the cycle ends without a write; that is not an
    error, the next scheduled tick simply tries again.
    """

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        store: AircraftStore,
        clock: Callable = utcnow,
    ):
        self.adapters: List[ProviderAdapter] = list(adapters)
        self.store = store
        self._clock = clock

    def run(self) -> FetchOutcome:
        """
        Execute one ingestion cycle.

        Raises:
            StorageError if the upsert fails
        """
        for adapter in self.adapters:
            try:
                observations = adapter.fetch()
            except ProviderUnavailable as e:
                logger.warning(f'Provider {adapter.name} unavailable, trying next: {e.message}')
                continue

            if not observations:
                logger.info(f'Provider {adapter.name} returned no aircraft, trying next')
                continue

            records = normalize_batch(observations, self._clock(), provider=adapter.name)
            if not records:
                logger.info(
                    f'Provider {adapter.name} returned {len(observations)} observations '
                    f'but none had an identifier and position, trying next'
                )
                continue

            count = self.store.upsert_many(records)
            logger.info(f'Updated {count} aircraft from {adapter.name}')
            return FetchOutcome(FetchStatus.UPDATED, provider_used=adapter.name, count=count)

        logger.warning('No aircraft data available from any source')
        return FetchOutcome(FetchStatus.NO_DATA)
