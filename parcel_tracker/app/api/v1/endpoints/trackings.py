"""
Customer Tracking API Endpoints.

Public lookup of a shipment by tracking ID.
"""

from fastapi import APIRouter, Depends, Path
from parcel_tracker.app.core.dependencies import get_tracking_repository
from parcel_tracker.app.domain.tracking.progress_engine import ProgressEngine
from parcel_tracker.app.repositories.tracking_repository import TrackingRepository
from parcel_tracker.app.schemas.tracking import (
    LocationResponse, TimelineEntry, TimelineResponse, TrackingResponse
)
from parcel_tracker.app.services.tracking_service import get_tracking

router = APIRouter(prefix="/trackings", tags=["Tracking"])


@router.get("/{tracking_id}", response_model=TrackingResponse)
async def fetch_tracking(
    tracking_id: str = Path(..., description="Tracking ID"),
    repo: TrackingRepository = Depends(get_tracking_repository)
):
    """Get a tracking by ID. 404 if it does not exist."""
    tracking = await get_tracking(repo, tracking_id)
    return TrackingResponse.model_validate(tracking)


@router.get("/{tracking_id}/timeline", response_model=TimelineResponse)
async def fetch_timeline(
    tracking_id: str = Path(..., description="Tracking ID"),
    repo: TrackingRepository = Depends(get_tracking_repository)
):
    """
    Get the route of a tracking with each location marked
    completed, current or pending.
    """
    tracking = await get_tracking(repo, tracking_id)

    return TimelineResponse(
        tracking_id=tracking.id,
        status=tracking.status,
        current_location_index=tracking.current_location_index,
        entries=[
            TimelineEntry(index=index, location=LocationResponse.model_validate(location), state=state)
            for index, location, state in ProgressEngine.timeline(tracking)
        ]
    )
