"""
Normalizer - maps RawObservations onto Aircraft rows.

Observations without an icao24 or without both coordinates cannot be
stored meaningfully or located, so they are dropped. Every other field
passes through unchanged; absent values stay None rather than zero.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from airtracker.ingestion.base import RawObservation
from airtracker.store import normalize_icao24

logger = logging.getLogger(__name__)


def _clean_callsign(callsign: Optional[str]) -> Optional[str]:
    """Strip padding; a blank callsign means no callsign."""
    if callsign is None:
        return None
    return str(callsign).strip() or None


def normalize(
    raw: RawObservation,
    ingested_at: datetime,
    provider: Optional[str] = None,
) -> Optional[dict]:
    """
    Convert one observation into a dict ready for the aircraft upsert.

    Returns None if the observation is rejected.
    """
    icao24 = normalize_icao24(raw.icao24)
    if icao24 is None or raw.latitude is None or raw.longitude is None:
        return None

    return {
        'icao24': icao24,
        'callsign': _clean_callsign(raw.callsign),
        'origin_country': raw.origin_country,
        'latitude': raw.latitude,
        'longitude': raw.longitude,
        'altitude': raw.altitude,
        'geo_altitude': raw.geo_altitude,
        'on_ground': bool(raw.on_ground),
        'velocity': raw.velocity,
        'true_track': raw.true_track,
        'vertical_rate': raw.vertical_rate,
        'squawk': raw.squawk,
        'spi': bool(raw.spi),
        'position_source': raw.position_source,
        'sensors': raw.sensors,
        'category': raw.category,
        'provider': provider,
        'time_position': raw.time_position,
        'last_contact': raw.last_contact,
        'last_updated': ingested_at,
    }


def normalize_batch(
    observations: Iterable[RawObservation],
    ingested_at: datetime,
    provider: Optional[str] = None,
) -> List[dict]:
    """
    Normalize a provider batch.

    Rejected observations are dropped. When one icao24 appears more than
    once, the last observation wins so the upsert sees one row per key.
    """
    records = {}
    total = 0
    for raw in observations:
        total += 1
        record = normalize(raw, ingested_at, provider)
        if record is not None:
            records[record['icao24']] = record

    rejected = total - len(records)
    if rejected:
        logger.debug(f'Dropped {rejected} of {total} observations from {provider or "provider"}')

    return list(records.values())
