"""
Admin Tracking Management API Endpoints.

Administrators create, list, edit, advance and delete trackings,
and upload product images.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Path, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_tracker.app.core.config import settings
from parcel_tracker.app.core.dependencies import get_current_admin, get_tracking_repository
from parcel_tracker.app.db.session import get_db
from parcel_tracker.app.domain.tracking.factory import TrackingFactory
from parcel_tracker.app.models.tracking_enums import TrackingStatus
from parcel_tracker.app.repositories.tracking_repository import TrackingRepository
from parcel_tracker.app.schemas.tracking import (
    ImageUploadResponse,
    MessageResponse,
    ProgressUpdate,
    TrackingCreate,
    TrackingResponse,
    TrackingSummary,
    TrackingUpdate,
)
from parcel_tracker.app.services import tracking_service
from parcel_tracker.app.services.audit import log_event, AuditAction
from parcel_tracker.app.services.image_storage import ImageStorage, get_image_storage, store_image, validate_image

router = APIRouter(prefix="/admin", tags=["Admin - Trackings"])


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.post("/trackings", response_model=TrackingResponse, status_code=status.HTTP_201_CREATED)
async def create_tracking(
    tracking_data: TrackingCreate,
    request: Request,
    current_admin: dict = Depends(get_current_admin),
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new tracking (Admin only).

    Validates:
    - name, startLocation, endLocation, userName, userEmail, userPhone are not blank
    - userEmail looks like local@domain.tld

    Blank stopovers are dropped; the rest keep their order.
    """
    draft = TrackingFactory.validate(
        name=tracking_data.name,
        start_location=tracking_data.start_location,
        end_location=tracking_data.end_location,
        stopovers=tracking_data.stopovers,
        user_name=tracking_data.user_name,
        user_email=tracking_data.user_email,
        user_phone=tracking_data.user_phone,
        image_url=tracking_data.image_url,
    )
    tracking = await tracking_service.create_tracking(repo, draft)

    await log_event(
        db=db,
        action=AuditAction.TRACKING_CREATED,
        actor_username=current_admin["sub"],
        tracking_id=tracking.id,
        metadata={"name": tracking.name, "stopovers": len(tracking.stopover_links)},
        ip_address=_client_ip(request)
    )

    return TrackingResponse.model_validate(tracking)


@router.get("/trackings", response_model=List[TrackingResponse])
async def list_trackings(
    status_filter: Optional[TrackingStatus] = Query(None, alias="status", description="Only trackings with this status"),
    current_admin: dict = Depends(get_current_admin),
    repo: TrackingRepository = Depends(get_tracking_repository)
):
    """List trackings, newest first (Admin only)."""
    trackings = await tracking_service.list_trackings(repo, status=status_filter)
    return [TrackingResponse.model_validate(t) for t in trackings]


@router.get("/trackings/summary", response_model=TrackingSummary)
async def tracking_summary(
    current_admin: dict = Depends(get_current_admin),
    repo: TrackingRepository = Depends(get_tracking_repository)
):
    """Tracking counts per status, for the dashboard stats (Admin only)."""
    return TrackingSummary(**await tracking_service.summarize_trackings(repo))


@router.patch("/trackings/{tracking_id}", response_model=TrackingResponse)
async def update_tracking(
    request: Request,
    tracking_id: str = Path(..., description="Tracking ID"),
    tracking_data: TrackingUpdate = ...,
    current_admin: dict = Depends(get_current_admin),
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: AsyncSession = Depends(get_db)
):
    """
    Update tracking details (Admin only).

    Accepts any of name, estimatedDelivery, status, currentLocationIndex.
    Absent or null fields are left untouched. Route and customer are fixed.
    """
    changes = {
        field: value
        for field, value in tracking_data.model_dump(exclude_unset=True).items()
        if value is not None
    }
    tracking = await tracking_service.update_tracking(repo, tracking_id, changes)

    await log_event(
        db=db,
        action=AuditAction.TRACKING_UPDATED,
        actor_username=current_admin["sub"],
        tracking_id=tracking.id,
        metadata={"updated_fields": sorted(changes.keys())},
        ip_address=_client_ip(request)
    )

    return TrackingResponse.model_validate(tracking)


@router.patch("/trackings/{tracking_id}/progress", response_model=TrackingResponse)
async def update_progress(
    request: Request,
    tracking_id: str = Path(..., description="Tracking ID"),
    progress: ProgressUpdate = ...,
    current_admin: dict = Depends(get_current_admin),
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: AsyncSession = Depends(get_db)
):
    """
    Move a tracking along its route (Admin only).

    - currentLocationIndex given: package moves there; status is completed
      at the final location and in-progress elsewhere, unless status is given
    - only status given: status changes, position stays
    """
    tracking = await tracking_service.update_progress(
        repo,
        tracking_id,
        status=progress.status,
        current_location_index=progress.current_location_index
    )

    await log_event(
        db=db,
        action=AuditAction.TRACKING_PROGRESS_UPDATED,
        actor_username=current_admin["sub"],
        tracking_id=tracking.id,
        metadata={
            "status": tracking.status.value,
            "current_location_index": tracking.current_location_index
        },
        ip_address=_client_ip(request)
    )

    return TrackingResponse.model_validate(tracking)


@router.delete("/trackings/{tracking_id}", response_model=MessageResponse)
async def delete_tracking(
    request: Request,
    tracking_id: str = Path(..., description="Tracking ID"),
    current_admin: dict = Depends(get_current_admin),
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a tracking and its stopover ordering (Admin only).

    Customers and locations are kept. Deleting twice yields 404.
    """
    await tracking_service.delete_tracking(repo, tracking_id)

    await log_event(
        db=db,
        action=AuditAction.TRACKING_DELETED,
        actor_username=current_admin["sub"],
        tracking_id=tracking_id,
        ip_address=_client_ip(request)
    )

    return MessageResponse(message="Tracking deleted successfully")


@router.post("/uploads", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    request: Request,
    file: UploadFile = File(..., description="JPEG, PNG or WebP image"),
    current_admin: dict = Depends(get_current_admin),
    storage: ImageStorage = Depends(get_image_storage),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload a product image (Admin only).

    Returns the URL to pass as imageUrl when creating a tracking.
    """
    content_type = file.content_type or ""
    # Reject on the declared size before buffering anything
    validate_image(content_type, file.size or 0)
    # One byte past the limit is enough to know the file is too large
    data = await file.read(settings.upload_max_bytes + 1)
    image_url = await store_image(storage, data, content_type)

    await log_event(
        db=db,
        action=AuditAction.IMAGE_UPLOADED,
        actor_username=current_admin["sub"],
        metadata={"image_url": image_url, "size": len(data), "content_type": file.content_type},
        ip_address=_client_ip(request)
    )

    return ImageUploadResponse(image_url=image_url)
