"""
Tracking service.

Coordinates the domain rules (factory, progress engine) with the
tracking repository for each administrator and customer operation.
"""

import logging
from typing import Any, Dict, List, Optional

from parcel_tracker.app.core.config import settings
from parcel_tracker.app.core.exceptions import (
    PersistenceError,
    ResourceNotFoundError,
    TrackingIdConflictError,
    ValidationError,
)
from parcel_tracker.app.domain.tracking.factory import TrackingFactory, TrackingDraft
from parcel_tracker.app.domain.tracking.progress_engine import ProgressEngine
from parcel_tracker.app.domain.tracking.tracking_id import generate_tracking_id
from parcel_tracker.app.models.tracking import Tracking
from parcel_tracker.app.models.tracking_enums import TrackingStatus
from parcel_tracker.app.repositories.tracking_repository import TrackingRepository

logger = logging.getLogger(__name__)


async def create_tracking(repo: TrackingRepository, draft: TrackingDraft) -> Tracking:
    """
    Persist a validated draft under a fresh tracking ID.

    A colliding ID is regenerated up to `tracking_id_max_attempts` times.

    Raises:
        PersistenceError: If storage fails or no free ID was found.
    """
    for attempt in range(1, settings.tracking_id_max_attempts + 1):
        tracking = TrackingFactory.build(draft, generate_tracking_id())
        try:
            return await repo.insert(tracking)
        except TrackingIdConflictError as exc:
            logger.warning(
                "Tracking ID collision, regenerating",
                extra={"tracking_id": exc.tracking_id, "attempt": attempt}
            )

    logger.error(
        "Gave up generating a tracking ID",
        extra={"attempts": settings.tracking_id_max_attempts}
    )
    raise PersistenceError("Could not allocate a tracking ID")


async def get_tracking(repo: TrackingRepository, tracking_id: str) -> Tracking:
    """
    Raises:
        ResourceNotFoundError: If no tracking has this ID.
    """
    tracking = await repo.find_by_id(tracking_id)
    if tracking is None:
        raise ResourceNotFoundError("Tracking", tracking_id)
    return tracking


async def list_trackings(repo: TrackingRepository, status: Optional[TrackingStatus] = None) -> List[Tracking]:
    return await repo.list_all(status=status)


async def summarize_trackings(repo: TrackingRepository) -> Dict[str, int]:
    """Tracking counts per status plus the overall total; every status is present."""
    counts = await repo.count_by_status()
    summary = {status.name.lower(): counts.get(status, 0) for status in TrackingStatus}
    summary["total"] = sum(counts.values())
    return summary


async def update_tracking(repo: TrackingRepository, tracking_id: str, changes: Dict[str, Any]) -> Tracking:
    """
    Apply an administrator's partial update.

    Fields are stored as given. A new current_location_index is
    bound-checked but does not derive a status; that is what
    `update_progress` is for.

    Raises:
        ValidationError: If name is blank or the index is off the route.
        ResourceNotFoundError: If no tracking has this ID.
    """
    tracking = await get_tracking(repo, tracking_id)
    changes = dict(changes)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("name")
        changes["name"] = name

    if "current_location_index" in changes:
        ProgressEngine.validate_index(tracking, changes["current_location_index"])

    updated = await repo.update(tracking_id, changes)
    if updated is None:
        raise ResourceNotFoundError("Tracking", tracking_id)
    return updated


async def update_progress(
    repo: TrackingRepository,
    tracking_id: str,
    status: Optional[TrackingStatus] = None,
    current_location_index: Optional[int] = None
) -> Tracking:
    """
    Move a tracking along its route and/or change its status.

    With an index, the progress engine advances the package (status derived
    unless given). With only a status, the status changes in place.

    Raises:
        ValidationError: If neither field is given or the index is off the route.
        ResourceNotFoundError: If no tracking has this ID.
    """
    if status is None and current_location_index is None:
        raise ValidationError("status")

    tracking = await get_tracking(repo, tracking_id)

    if current_location_index is not None:
        ProgressEngine.advance_to(tracking, current_location_index, explicit_status=status)
    else:
        ProgressEngine.set_status(tracking, status)

    await repo.save_progress(tracking)
    logger.info(
        "Tracking progress updated",
        extra={
            "tracking_id": tracking.id,
            "status": tracking.status.value,
            "current_location_index": tracking.current_location_index,
        }
    )
    return tracking


async def delete_tracking(repo: TrackingRepository, tracking_id: str) -> None:
    """
    Raises:
        ResourceNotFoundError: If no tracking has this ID (including a repeat delete).
    """
    if not await repo.delete(tracking_id):
        raise ResourceNotFoundError("Tracking", tracking_id)
