"""
Location database model.

A location is one slot of a tracking route: start, stopover or end.
"""

from sqlalchemy import Column, Integer, String, Text, Float, DateTime
from parcel_tracker.app.db.session import Base
from parcel_tracker.app.models.timestamps import utcnow


class Location(Base):
    """
    Route location.

    Immutable once created. The same physical place may exist
    several times, once per route slot that references it.
    """
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(Text, nullable=False)
    address = Column(Text, nullable=False)

    # Optional coordinates
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def coordinates(self):
        if self.latitude is None or self.longitude is None:
            return None
        return {"lat": self.latitude, "lng": self.longitude}

    def __repr__(self):
        return f"<Location(id={self.id}, name='{self.name}')>"
