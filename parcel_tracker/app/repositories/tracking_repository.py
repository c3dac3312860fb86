"""
Tracking repository.

Persistence boundary for tracking aggregates. Multi-row writes (create,
delete) run in a single transaction: either every row is written or none.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from parcel_tracker.app.core.exceptions import PersistenceError, TrackingIdConflictError
from parcel_tracker.app.models.timestamps import utcnow
from parcel_tracker.app.models.tracking import Tracking
from parcel_tracker.app.models.tracking_enums import TrackingStatus
from parcel_tracker.app.models.user import User

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"name", "status", "current_location_index", "estimated_delivery", "image_url"}

# Written together on every progress change, even when a value did not move
PROGRESS_FIELDS = ("status", "current_location_index", "updated_at")


class TrackingRepository:
    """
    Stores and loads trackings through one database session.

    Instances are created per request (see `get_tracking_repository`).
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, tracking_id: str) -> Optional[Tracking]:
        result = await self.db.execute(
            select(Tracking).where(Tracking.id == tracking_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self, status: Optional[TrackingStatus] = None) -> List[Tracking]:
        """All trackings, newest first."""
        query = select(Tracking).order_by(Tracking.created_at.desc())
        if status is not None:
            query = query.where(Tracking.status == status)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_by_status(self) -> Dict[TrackingStatus, int]:
        """Number of trackings per status. Statuses with none are absent."""
        result = await self.db.execute(
            select(Tracking.status, func.count()).group_by(Tracking.status)
        )
        return {status: count for status, count in result.all()}

    async def insert(self, tracking: Tracking) -> Tracking:
        """
        Persist a new tracking with its customer, route locations and
        stopover rows.

        The customer is matched by email and reused when one exists.

        Raises:
            TrackingIdConflictError: If the tracking ID is already taken.
            PersistenceError: For any other storage failure.
        """
        try:
            if await self.db.get(Tracking, tracking.id) is not None:
                raise TrackingIdConflictError(tracking.id)

            tracking.user = await self._resolve_user(tracking.user)

            self.db.add_all(
                [tracking.start_location, tracking.end_location, *tracking.stopovers]
            )
            await self.db.flush()

            self.db.add(tracking)
            await self.db.flush()

            await self.db.commit()
        except TrackingIdConflictError:
            await self.db.rollback()
            raise
        except IntegrityError as exc:
            await self.db.rollback()
            if await self.db.get(Tracking, tracking.id) is not None:
                raise TrackingIdConflictError(tracking.id) from exc
            logger.exception("Integrity failure while creating tracking %s", tracking.id)
            raise PersistenceError() from exc
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Storage failure while creating tracking %s", tracking.id)
            raise PersistenceError() from exc

        logger.info("Tracking %s created", tracking.id, extra={"tracking_id": tracking.id})
        return tracking

    async def _resolve_user(self, candidate: User) -> User:
        result = await self.db.execute(
            select(User).where(User.email == candidate.email).order_by(User.id).limit(1)
        )
        existing = result.scalar_one_or_none()
        if existing is not None:
            return existing

        self.db.add(candidate)
        await self.db.flush()
        return candidate

    async def update(self, tracking_id: str, fields: Dict[str, Any]) -> Optional[Tracking]:
        """
        Apply a partial update. Fields outside the mutable set are ignored.

        Returns:
            The updated tracking, or None if it does not exist.
        """
        tracking = await self.find_by_id(tracking_id)
        if tracking is None:
            return None

        applied = [name for name in fields if name in UPDATABLE_FIELDS]
        for name in applied:
            setattr(tracking, name, fields[name])
            flag_modified(tracking, name)
        tracking.updated_at = utcnow()

        return await self.save(tracking)

    async def save_progress(self, tracking: Tracking) -> Tracking:
        """
        Commit a progress change as one unit.

        status, current_location_index and updated_at are always written,
        so a concurrent writer can never leave a pair that neither request
        produced.
        """
        for name in PROGRESS_FIELDS:
            flag_modified(tracking, name)
        return await self.save(tracking)

    async def save(self, tracking: Tracking) -> Tracking:
        """Commit changes made to a loaded tracking."""
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Storage failure while updating tracking %s", tracking.id)
            raise PersistenceError() from exc
        return tracking

    async def delete(self, tracking_id: str) -> bool:
        """
        Remove a tracking and its stopover rows.

        Customers and locations are kept.

        Returns:
            True if a tracking was deleted, False if none existed.
        """
        tracking = await self.find_by_id(tracking_id)
        if tracking is None:
            return False

        try:
            await self.db.delete(tracking)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Storage failure while deleting tracking %s", tracking_id)
            raise PersistenceError() from exc

        logger.info("Tracking %s deleted", tracking_id, extra={"tracking_id": tracking_id})
        return True
