"""
Progress Engine (Domain Logic).

Keeps a tracking's status and current location index describing one
coherent point of the journey. All progress changes go through here.
"""

from typing import Optional

from parcel_tracker.app.core.exceptions import InvalidLocationIndexError
from parcel_tracker.app.models.timestamps import utcnow
from parcel_tracker.app.models.tracking import Tracking
from parcel_tracker.app.models.tracking_enums import TrackingStatus, LocationState


class ProgressEngine:

    @staticmethod
    def route_length(tracking: Tracking) -> int:
        """Number of locations in the flattened route (start + stopovers + end)."""
        return len(tracking.stopover_links) + 2

    @staticmethod
    def validate_index(tracking: Tracking, index: int) -> None:
        """
        Raises:
            InvalidLocationIndexError: If index is outside 0..route_length - 1.
        """
        length = ProgressEngine.route_length(tracking)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < length:
            raise InvalidLocationIndexError(index, length)

    @staticmethod
    def derive_status(tracking: Tracking, index: int) -> TrackingStatus:
        """Status implied by position alone: completed at the end, in progress elsewhere."""
        if index == ProgressEngine.route_length(tracking) - 1:
            return TrackingStatus.COMPLETED
        return TrackingStatus.IN_PROGRESS

    @staticmethod
    def advance_to(
        tracking: Tracking,
        new_index: int,
        explicit_status: Optional[TrackingStatus] = None
    ) -> Tracking:
        """
        Move the package to a route location.

        Without explicit_status the status is derived from the position.
        An explicit status is stored verbatim, even when it disagrees with
        the position (e.g. completed while mid-route).

        The tracking is left untouched when validation fails.

        Raises:
            InvalidLocationIndexError: If new_index is outside the route.
        """
        ProgressEngine.validate_index(tracking, new_index)

        if explicit_status is not None:
            status = TrackingStatus(explicit_status)
        else:
            status = ProgressEngine.derive_status(tracking, new_index)

        tracking.current_location_index = new_index
        tracking.status = status
        tracking.updated_at = utcnow()
        return tracking

    @staticmethod
    def set_status(tracking: Tracking, status: TrackingStatus) -> Tracking:
        """Change status without moving the package."""
        tracking.status = TrackingStatus(status)
        tracking.updated_at = utcnow()
        return tracking

    @staticmethod
    def location_state(tracking: Tracking, index: int) -> LocationState:
        current = tracking.current_location_index
        if index < current:
            return LocationState.COMPLETED
        if index == current:
            return LocationState.CURRENT
        return LocationState.PENDING

    @staticmethod
    def timeline(tracking: Tracking) -> list:
        """Route locations paired with their state, in route order."""
        return [
            (index, location, ProgressEngine.location_state(tracking, index))
            for index, location in enumerate(tracking.route)
        ]
