"""
Tracking stopover database model.

Links a tracking to its intermediate locations in route order.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from parcel_tracker.app.models.location import Location
from parcel_tracker.app.db.session import Base
from parcel_tracker.app.models.timestamps import utcnow


class TrackingStopover(Base):
    """
    Stopover ordering row.

    `order` is contiguous from 0 within a tracking.
    """
    __tablename__ = "tracking_stopovers"
    __table_args__ = (
        UniqueConstraint("tracking_id", "order", name="uq_tracking_stopover_order"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tracking_id = Column(String(50), ForeignKey("trackings.id", ondelete="CASCADE"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)
    order = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    location = relationship(Location, lazy="joined")

    def __repr__(self):
        return f"<TrackingStopover(tracking_id='{self.tracking_id}', order={self.order}, location_id={self.location_id})>"
