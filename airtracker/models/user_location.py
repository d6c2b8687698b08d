"""
UserLocation model - last reported position per user.

A trivial key/value table: one row per user_id, replaced on every store.
"""

from datetime import datetime

from sqlalchemy import String, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from airtracker.models.base import Base, utcnow


class UserLocation(Base):
    """Most recent location reported by a user."""

    __tablename__ = 'user_locations'

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f'<UserLocation {self.user_id} ({self.latitude:.4f}, {self.longitude:.4f})>'

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }
