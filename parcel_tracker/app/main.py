"""
FastAPI Application Entry Point.

This is the main application file for the Parcel Tracker Backend.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from parcel_tracker.app.core.config import settings
from parcel_tracker.app.api.v1.router import router as api_v1_router
from parcel_tracker.app.db.session import engine, init_models
from parcel_tracker.app.core.observability import ObservabilityMiddleware, configure_logging
from parcel_tracker.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from parcel_tracker.app.models.user import User
from parcel_tracker.app.models.location import Location
from parcel_tracker.app.models.tracking import Tracking
from parcel_tracker.app.models.tracking_stopover import TrackingStopover
from parcel_tracker.app.models.admin import Admin
from parcel_tracker.app.models.audit_log import AuditLog

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Disposes the engine on shutdown.
    """
    await init_models()
    yield
    await engine.dispose()

# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Shipment tracking backend: customers follow a package along its route, administrators advance it",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")

# Uploaded images
Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount(settings.upload_base_url, StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to Parcel Tracker Backend API",
        "docs": "/docs",
        "health": "/health",
    }
