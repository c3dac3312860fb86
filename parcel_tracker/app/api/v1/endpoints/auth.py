"""
Admin authentication API endpoints.

Login issues a short-lived JWT that every admin endpoint requires.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from parcel_tracker.app.db.session import get_db
from parcel_tracker.app.schemas.auth import AdminLogin, TokenResponse, AdminResponse
from parcel_tracker.app.core.jwt import create_access_token
from parcel_tracker.app.core.exceptions import AuthenticationError
from parcel_tracker.app.core.dependencies import ADMIN_ROLE, get_admin_repository, get_current_admin
from parcel_tracker.app.repositories.admin_repository import AdminRepository
from parcel_tracker.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/admin", tags=["Admin - Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: AdminLogin,
    request: Request,
    admins: AdminRepository = Depends(get_admin_repository),
    db: AsyncSession = Depends(get_db)
):
    """
    Login admin and return JWT token.

    Logs successful and failed login attempts for security monitoring.
    """
    ip_address = request.client.host if request.client else None

    if not await admins.find_admin(credentials.username, credentials.password):
        await log_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            actor_username=credentials.username,
            ip_address=ip_address
        )
        raise AuthenticationError("Invalid credentials")

    access_token = create_access_token(data={"sub": credentials.username, "role": ADMIN_ROLE})

    await log_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        actor_username=credentials.username,
        ip_address=ip_address
    )

    return TokenResponse(access_token=access_token, username=credentials.username)


@router.get("/me", response_model=AdminResponse)
async def get_current_admin_info(current_admin: dict = Depends(get_current_admin)):
    """Get the authenticated admin's identity."""
    return AdminResponse(username=current_admin["sub"], role=current_admin["role"])
