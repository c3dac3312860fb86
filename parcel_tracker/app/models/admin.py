"""
Admin database model.

Administrators manage trackings. Passwords are stored hashed.
"""

from sqlalchemy import Column, Integer, String, DateTime
from parcel_tracker.app.db.session import Base
from parcel_tracker.app.models.timestamps import utcnow


class Admin(Base):
    """Administrator credentials."""
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Admin(id={self.id}, username='{self.username}')>"
