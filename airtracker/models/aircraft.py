"""
Aircraft model - latest known state of every aircraft seen.

This table is a "hot" table: overwritten on each ingestion cycle and
scanned constantly by proximity queries.

Design notes:
- One row per aircraft (upsert pattern, no history)
- Indexed for point lookups by icao24 and candidate scans by location
- Rows are never deleted; stale ones age out through query-time filters
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Float, Integer, DateTime, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column

from airtracker.models.base import Base, utcnow


class Aircraft(Base):
    """
    Current state of a tracked aircraft, keyed by ICAO24 address.

    Telemetry fields mirror the OpenSky state vector in SI units
    (meters, m/s, degrees). Absent values stay NULL rather than zero,
    since zero is a valid altitude and velocity.
    """

    __tablename__ = 'aircraft'

    # Primary key - ICAO24 hex address (unique + point lookup index)
    icao24: Mapped[str] = mapped_column(
        String(16),
        primary_key=True,
        comment='ICAO24 hex transponder address'
    )

    # Identification
    callsign: Mapped[Optional[str]] = mapped_column(
        String(16),
        nullable=True,
        comment='Flight callsign as broadcast'
    )

    origin_country: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment='Country of aircraft registration'
    )

    # Position (WGS84)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    altitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment='Barometric altitude in meters'
    )

    geo_altitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment='Geometric (GPS) altitude in meters'
    )

    # Velocity and direction
    velocity: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment='Ground speed in m/s'
    )

    true_track: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment='Track angle in degrees (0=north)'
    )

    vertical_rate: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment='Vertical rate in m/s (positive=climb)'
    )

    # Status flags
    on_ground: Mapped[bool] = mapped_column(Boolean, default=False)

    squawk: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)

    spi: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        comment='Special Position Identification flag'
    )

    # Data quality indicators
    position_source: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment='Position source: 0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM'
    )

    sensors: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment='Comma-separated receiver sensor IDs'
    )

    category: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    provider: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        comment='Provider that produced this row'
    )

    # Provider timestamps (unix seconds)
    time_position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    last_contact: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Set to ingestion time on every write
    last_updated: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        comment='Ingestion timestamp (UTC)'
    )

    __table_args__ = (
        # Candidate scans for proximity queries
        Index('ix_aircraft_position', 'latitude', 'longitude'),
        # Most-recent ordering and "updated in the last hour" stats
        Index('ix_aircraft_last_updated', 'last_updated'),
    )

    def __repr__(self) -> str:
        return f'<Aircraft {self.icao24} {self.callsign or "?"} @ {self.altitude or 0:.0f}m>'

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'icao24': self.icao24,
            'callsign': self.callsign,
            'origin_country': self.origin_country,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'altitude': self.altitude,
            'geo_altitude': self.geo_altitude,
            'on_ground': self.on_ground,
            'velocity': self.velocity,
            'true_track': self.true_track,
            'vertical_rate': self.vertical_rate,
            'squawk': self.squawk,
            'spi': self.spi,
            'position_source': self.position_source,
            'sensors': self.sensors,
            'category': self.category,
            'provider': self.provider,
            'time_position': self.time_position,
            'last_contact': self.last_contact,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
        }
