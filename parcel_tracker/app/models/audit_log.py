"""
Audit Log Database Model.

Tracks administrator actions on trackings and login attempts.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from parcel_tracker.app.db.session import Base
from parcel_tracker.app.models.timestamps import utcnow


class AuditLog(Base):
    """
    Audit log model for administrator actions.

    Events logged:
    - TRACKING_CREATED / TRACKING_UPDATED / TRACKING_DELETED
    - TRACKING_PROGRESS_UPDATED
    - IMAGE_UPLOADED
    - LOGIN_SUCCESS / LOGIN_FAILED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for anonymous login attempts)
    actor_username = Column(String(100), nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # Tracking the action applies to (if any)
    tracking_id = Column(String(50), index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # IP address for login tracking
    ip_address = Column(String(50), nullable=True)

    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username}, tracking={self.tracking_id})>"
