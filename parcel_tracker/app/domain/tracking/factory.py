"""
Tracking Factory (Domain Logic).

Builds a new tracking aggregate (customer, route locations, stopover
ordering) from raw creation input.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from parcel_tracker.app.core.config import settings
from parcel_tracker.app.core.exceptions import ValidationError
from parcel_tracker.app.domain.tracking.tracking_id import generate_tracking_id
from parcel_tracker.app.models.location import Location
from parcel_tracker.app.models.timestamps import utcnow
from parcel_tracker.app.models.tracking import Tracking
from parcel_tracker.app.models.tracking_enums import TrackingStatus
from parcel_tracker.app.models.tracking_stopover import TrackingStopover
from parcel_tracker.app.models.user import User

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class TrackingDraft:
    """Validated, trimmed creation input."""
    name: str
    start_location: str
    end_location: str
    user_name: str
    user_email: str
    user_phone: str
    stopovers: List[str] = field(default_factory=list)
    image_url: Optional[str] = None


def _required(value: Optional[str], wire_name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(wire_name)
    return cleaned


def _location(text: str) -> Location:
    # No separate label at creation time: name and address share the text
    return Location(name=text, address=text)


class TrackingFactory:

    @staticmethod
    def validate(
        name: Optional[str],
        start_location: Optional[str],
        end_location: Optional[str],
        stopovers: Optional[Iterable[str]],
        user_name: Optional[str],
        user_email: Optional[str],
        user_phone: Optional[str],
        image_url: Optional[str] = None
    ) -> TrackingDraft:
        """
        Validate and normalize creation input.

        Required fields are checked in order and the first blank one is
        reported by its wire name. Blank stopovers are dropped, the rest
        keep the order they were given in.

        Raises:
            ValidationError: Naming the first missing or malformed field.
        """
        draft = TrackingDraft(
            name=_required(name, "name"),
            start_location=_required(start_location, "startLocation"),
            end_location=_required(end_location, "endLocation"),
            user_name=_required(user_name, "userName"),
            user_email=_required(user_email, "userEmail"),
            user_phone=_required(user_phone, "userPhone"),
        )

        if not EMAIL_PATTERN.match(draft.user_email):
            raise ValidationError("userEmail", message="Invalid email format")

        draft.stopovers = [s.strip() for s in (stopovers or []) if s and s.strip()]
        draft.image_url = (image_url or "").strip() or None
        return draft

    @staticmethod
    def build(draft: TrackingDraft, tracking_id: str, now: Optional[datetime] = None) -> Tracking:
        """
        Assemble a transient tracking in its initial state.

        Initial state: pending, at the start location, delivery expected
        `estimated_delivery_days` from now.
        """
        now = now or utcnow()

        return Tracking(
            id=tracking_id,
            name=draft.name,
            user=User(
                name=draft.user_name,
                email=draft.user_email,
                phone=draft.user_phone,
                created_at=now,
                updated_at=now,
            ),
            start_location=_location(draft.start_location),
            end_location=_location(draft.end_location),
            stopover_links=[
                TrackingStopover(order=order, location=_location(text), created_at=now)
                for order, text in enumerate(draft.stopovers)
            ],
            status=TrackingStatus.PENDING,
            current_location_index=0,
            estimated_delivery=now + timedelta(days=settings.estimated_delivery_days),
            image_url=draft.image_url,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def create(
        name: Optional[str],
        start_location: Optional[str],
        end_location: Optional[str],
        stopovers: Optional[Iterable[str]],
        user_name: Optional[str],
        user_email: Optional[str],
        user_phone: Optional[str],
        image_url: Optional[str] = None
    ) -> Tracking:
        """Validate input and build a tracking with a freshly generated ID."""
        draft = TrackingFactory.validate(
            name, start_location, end_location, stopovers,
            user_name, user_email, user_phone, image_url
        )
        return TrackingFactory.build(draft, generate_tracking_id())
