"""
Request dependencies for FastAPI.

Provides per-request repositories and admin JWT authentication.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from parcel_tracker.app.core.jwt import decode_access_token
from parcel_tracker.app.db.session import get_db
from parcel_tracker.app.repositories.admin_repository import AdminRepository
from parcel_tracker.app.repositories.tracking_repository import TrackingRepository

ADMIN_ROLE = "admin"

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


def get_tracking_repository(db: AsyncSession = Depends(get_db)) -> TrackingRepository:
    """Tracking repository bound to the request's database session."""
    return TrackingRepository(db)


def get_admin_repository(db: AsyncSession = Depends(get_db)) -> AdminRepository:
    return AdminRepository(db)


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    admins: AdminRepository = Depends(get_admin_repository)
) -> dict:
    """
    FastAPI dependency for admin JWT authentication.

    Checks:
    1. A bearer token is present
    2. Token signature and expiry are valid
    3. Token carries the admin role
    4. The admin still exists (real-time check)

    Returns:
        Decoded token payload

    Raises:
        HTTPException: 401 if authentication fails, 403 if the role is wrong
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("role") != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    if await admins.get_by_username(payload["sub"]) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload
