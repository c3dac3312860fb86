"""
Audit logging service for administrator actions and login attempts.

Audit rows are written after the business transaction has committed.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from parcel_tracker.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"

    TRACKING_CREATED = "TRACKING_CREATED"
    TRACKING_UPDATED = "TRACKING_UPDATED"
    TRACKING_PROGRESS_UPDATED = "TRACKING_PROGRESS_UPDATED"
    TRACKING_DELETED = "TRACKING_DELETED"

    IMAGE_UPLOADED = "IMAGE_UPLOADED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_username: Optional[str] = None,
    tracking_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None
) -> AuditLog:
    """
    Log an administrator event to the audit log.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_username: Username of the admin performing the action
        tracking_id: Tracking the action applies to
        metadata: Additional context as JSON
        ip_address: IP address of the request

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_username=actor_username,
        action=action,
        tracking_id=tracking_id,
        meta_data=metadata,
        ip_address=ip_address
    )

    db.add(audit_log)
    await db.commit()

    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    tracking_id: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering.

    Args:
        db: Database session
        tracking_id: Filter by tracking ID
        action: Filter by action type
        limit: Maximum number of records to return

    Returns:
        List of AuditLog instances, most recent first
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if tracking_id:
        query = query.where(AuditLog.tracking_id == tracking_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
