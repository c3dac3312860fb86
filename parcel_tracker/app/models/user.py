"""
Customer database model.

Customers are the contact people shipments are tracked for.
"""

from sqlalchemy import Column, Integer, String, DateTime
from parcel_tracker.app.db.session import Base
from parcel_tracker.app.models.timestamps import utcnow


class User(Base):
    """
    Customer contact (name, email, phone).

    Email is a soft dedup key used when creating trackings,
    not a unique identity.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), index=True, nullable=False)
    phone = Column(String(50), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}', email='{self.email}')>"
