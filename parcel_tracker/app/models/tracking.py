"""
Tracking database model.

A tracking is one shipment and its journey along a route.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from parcel_tracker.app.db.session import Base
from parcel_tracker.app.models.timestamps import utcnow
from parcel_tracker.app.models.tracking_enums import TrackingStatus
from parcel_tracker.app.models.tracking_stopover import TrackingStopover
from parcel_tracker.app.models.location import Location
from parcel_tracker.app.models.user import User


class Tracking(Base):
    """
    Tracking aggregate root.

    The route (start, ordered stopovers, end) and the customer are fixed at
    creation. Only name, status, current_location_index, estimated_delivery
    and image_url change afterwards.

    current_location_index points into the flattened route
    [start, *stopovers, end] and stays within 0..len(stopovers) + 1.
    """
    __tablename__ = "trackings"

    # External tracking ID like TRK4F7Q2ZK9A
    id = Column(String(50), primary_key=True)
    name = Column(Text, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)
    end_location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)

    # Progress
    status = Column(Enum(TrackingStatus), default=TrackingStatus.PENDING, nullable=False, index=True)
    current_location_index = Column(Integer, default=0, nullable=False)

    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    image_url = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship(User, lazy="joined")
    start_location = relationship(Location, foreign_keys=[start_location_id], lazy="joined")
    end_location = relationship(Location, foreign_keys=[end_location_id], lazy="joined")
    stopover_links = relationship(
        TrackingStopover,
        order_by=TrackingStopover.order,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def stopovers(self):
        return [link.location for link in self.stopover_links]

    @property
    def route(self):
        """Flattened route: start, stopovers in order, end."""
        return [self.start_location, *self.stopovers, self.end_location]

    def __repr__(self):
        return f"<Tracking(id='{self.id}', status='{self.status.value}', index={self.current_location_index})>"
