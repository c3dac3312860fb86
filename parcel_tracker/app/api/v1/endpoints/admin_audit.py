"""
Admin Audit Log API Endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_tracker.app.core.dependencies import get_current_admin
from parcel_tracker.app.db.session import get_db
from parcel_tracker.app.schemas.audit import AuditLogResponse
from parcel_tracker.app.services.audit import get_audit_trail

router = APIRouter(prefix="/admin", tags=["Admin - Audit"])


@router.get("/audit-logs", response_model=List[AuditLogResponse])
async def list_audit_logs(
    tracking_id: Optional[str] = Query(None, alias="trackingId", description="Only events for this tracking"),
    action: Optional[str] = Query(None, description="Only events with this action"),
    limit: int = Query(100, ge=1, le=500),
    current_admin: dict = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Audit trail, most recent first (Admin only)."""
    logs = await get_audit_trail(db, tracking_id=tracking_id, action=action, limit=limit)
    return [AuditLogResponse.model_validate(log) for log in logs]
