"""
Tracking-related enumerations.
"""

import enum


class TrackingStatus(str, enum.Enum):
    """
    Tracking status enumeration.

    No transition table is enforced: any status may follow any other.
    """
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LocationState(str, enum.Enum):
    """Position of a route location relative to the package."""
    COMPLETED = "completed"  # Already passed
    CURRENT = "current"  # Package is here
    PENDING = "pending"  # Not yet reached
