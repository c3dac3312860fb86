"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from parcel_tracker.app.api.v1.endpoints import auth, trackings, admin_trackings, admin_audit

router = APIRouter()

# Admin authentication
router.include_router(auth.router)

# Admin tracking management and uploads
router.include_router(admin_trackings.router)
router.include_router(admin_audit.router)

# Customer tracking lookup
router.include_router(trackings.router)
