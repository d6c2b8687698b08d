"""
Persistence layer for current aircraft state and user locations.

The aircraft table holds current state only: every ingestion cycle
overwrites the row for each icao24 it saw (INSERT ... ON CONFLICT DO
UPDATE), so there is never more than one row per aircraft.

Every SQLAlchemy failure is re-raised as StorageError so callers can
tell storage faults apart from bad input.
"""

import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from airtracker.exceptions import AircraftNotFound, LocationNotFound, StorageError
from airtracker.models import Aircraft, SessionLocal, UserLocation, utcnow

logger = logging.getLogger(__name__)

# Window for the "recently updated" statistic
RECENT_WINDOW = timedelta(hours=1)

TOP_COUNTRIES = 10


def normalize_icao24(icao24: Optional[str]) -> Optional[str]:
    """Canonical key form: stripped, lower-case hex. Blank becomes None."""
    if icao24 is None:
        return None
    value = str(icao24).strip().lower()
    return value or None


def _airborne_filter():
    """Rows that are flying: not on ground and above sea level."""
    return (
        Aircraft.on_ground.is_(False),
        Aircraft.altitude > 0,
    )


class _SessionStore:
    """Shared session handling for the stores."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or SessionLocal

    def _insert(self, session, model):
        """Dialect-specific INSERT supporting ON CONFLICT."""
        dialect = session.get_bind().dialect.name
        if dialect == 'postgresql':
            return pg_insert(model)
        return sqlite_insert(model)


class AircraftStore(_SessionStore):
    """
    Keyed table of latest-known aircraft state.

    Reads return detached Aircraft rows (the session factory is built
    with expire_on_commit=False) so they are safe to use after the
    session has closed.
    """

    def upsert_many(self, records: Iterable[dict]) -> int:
        """
        Insert or replace aircraft rows keyed by icao24.

        Each row is written by a single INSERT ... ON CONFLICT statement,
        so readers never observe a partially written record. The batch is
        committed as one transaction.

        Returns count of rows written.
        """
        records = list(records)
        if not records:
            return 0

        try:
            with self.session_factory() as session:
                for record in records:
                    stmt = self._insert(session, Aircraft).values(**record)
                    # Full replacement: every column except the key
                    stmt = stmt.on_conflict_do_update(
                        index_elements=['icao24'],
                        set_={
                            column: stmt.excluded[column]
                            for column in record
                            if column != 'icao24'
                        },
                    )
                    session.execute(stmt)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f'Aircraft upsert failed: {e}')
            raise StorageError('Failed to store aircraft data') from e

        logger.debug(f'Upserted {len(records)} aircraft')
        return len(records)

    def get(self, icao24: str) -> Aircraft:
        """Get a single aircraft by icao24, raising AircraftNotFound."""
        key = normalize_icao24(icao24)
        if key is None:
            raise AircraftNotFound(str(icao24))

        try:
            with self.session_factory() as session:
                aircraft = session.get(Aircraft, key)
        except SQLAlchemyError as e:
            logger.error(f'Aircraft lookup failed for {key}: {e}')
            raise StorageError('Failed to retrieve aircraft data') from e

        if aircraft is None:
            raise AircraftNotFound(key)
        return aircraft

    def scan_flying(self, limit: Optional[int] = None) -> List[Aircraft]:
        """
        Candidate set for proximity queries.

        Airborne rows with both coordinates, most recently updated first.
        """
        stmt = (
            select(Aircraft)
            .where(
                *_airborne_filter(),
                Aircraft.latitude.is_not(None),
                Aircraft.longitude.is_not(None),
            )
            .order_by(Aircraft.last_updated.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        return self._fetch_all(stmt, 'flying scan')

    def list_airborne(self, limit: int = 100) -> List[Aircraft]:
        """Bulk scan: up to `limit` most recently updated airborne rows."""
        stmt = (
            select(Aircraft)
            .where(*_airborne_filter())
            .order_by(Aircraft.last_updated.desc())
            .limit(limit)
        )
        return self._fetch_all(stmt, 'airborne listing')

    def stats(self) -> Dict[str, object]:
        """
        Aggregate counts for observability, computed on demand.

        Returns:
            total, airborne, on_ground, recent (updated within the last
            hour) and by_country (top origin countries by row count).
        """
        cutoff = utcnow() - RECENT_WINDOW
        count = func.count(Aircraft.icao24)

        try:
            with self.session_factory() as session:
                total = session.scalar(select(count))
                airborne = session.scalar(select(count).where(*_airborne_filter()))
                on_ground = session.scalar(
                    select(count).where(Aircraft.on_ground.is_(True))
                )
                recent = session.scalar(
                    select(count).where(Aircraft.last_updated > cutoff)
                )
                by_country = session.execute(
                    select(Aircraft.origin_country, count.label('count'))
                    .where(Aircraft.origin_country.is_not(None))
                    .group_by(Aircraft.origin_country)
                    .order_by(count.desc(), Aircraft.origin_country)
                    .limit(TOP_COUNTRIES)
                ).all()
        except SQLAlchemyError as e:
            logger.error(f'Aircraft statistics query failed: {e}')
            raise StorageError('Failed to retrieve aircraft statistics') from e

        return {
            'total': total or 0,
            'airborne': airborne or 0,
            'on_ground': on_ground or 0,
            'recent': recent or 0,
            'by_country': [
                {'origin_country': country, 'count': n}
                for country, n in by_country
            ],
        }

    def _fetch_all(self, stmt, what: str) -> List[Aircraft]:
        try:
            with self.session_factory() as session:
                return list(session.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f'Aircraft {what} failed: {e}')
            raise StorageError('Failed to retrieve aircraft data') from e


class UserLocationStore(_SessionStore):
    """One stored location per user."""

    def save(self, user_id: str, latitude: float, longitude: float) -> UserLocation:
        """Insert or replace the location for a user."""
        timestamp = utcnow()
        try:
            with self.session_factory() as session:
                stmt = self._insert(session, UserLocation).values(
                    user_id=user_id,
                    latitude=latitude,
                    longitude=longitude,
                    timestamp=timestamp,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=['user_id'],
                    set_={
                        'latitude': stmt.excluded.latitude,
                        'longitude': stmt.excluded.longitude,
                        'timestamp': stmt.excluded.timestamp,
                    },
                )
                session.execute(stmt)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f'Failed to store location for {user_id}: {e}')
            raise StorageError('Failed to store user location') from e

        return UserLocation(
            user_id=user_id,
            latitude=latitude,
            longitude=longitude,
            timestamp=timestamp,
        )

    def get(self, user_id: str) -> UserLocation:
        """Get the stored location for a user, raising LocationNotFound."""
        try:
            with self.session_factory() as session:
                location = session.get(UserLocation, user_id)
        except SQLAlchemyError as e:
            logger.error(f'Failed to load location for {user_id}: {e}')
            raise StorageError('Failed to retrieve user location') from e

        if location is None:
            raise LocationNotFound(user_id)
        return location
