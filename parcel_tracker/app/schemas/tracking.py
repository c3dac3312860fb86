"""
Tracking Pydantic schemas.

Defines request and response models for tracking management.
Wire names are camelCase (startLocation, currentLocationIndex, ...).
"""

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from typing import Optional, List
from parcel_tracker.app.models.tracking_enums import TrackingStatus, LocationState


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 UTC with milliseconds and a Z suffix. Naive values are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class TrackingCreate(CamelModel):
    """
    Schema for creating a new tracking.

    Required fields are checked by the tracking factory so that the
    error names the first missing field.
    """
    name: Optional[str] = Field(None, description="Package label")
    start_location: Optional[str] = Field(None, description="Start location text")
    end_location: Optional[str] = Field(None, description="End location text")
    stopovers: List[str] = Field(default_factory=list, description="Stopover texts in route order")
    user_name: Optional[str] = Field(None, description="Customer name")
    user_email: Optional[str] = Field(None, description="Customer email")
    user_phone: Optional[str] = Field(None, description="Customer phone")
    image_url: Optional[str] = Field(None, description="URL returned by the image upload endpoint")

    @field_validator("stopovers", mode="before")
    @classmethod
    def non_list_is_empty(cls, value):
        # null or any non-array value means no stopovers
        if not isinstance(value, list):
            return []
        return value


class TrackingUpdate(CamelModel):
    """Schema for updating an existing tracking. Absent fields are left untouched."""
    name: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    status: Optional[TrackingStatus] = None
    current_location_index: Optional[int] = None

    @field_validator("estimated_delivery", mode="before")
    @classmethod
    def blank_date_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProgressUpdate(CamelModel):
    """Schema for moving a tracking along its route."""
    status: Optional[TrackingStatus] = None
    current_location_index: Optional[int] = None


class CoordinatesResponse(BaseModel):
    lat: float
    lng: float


class LocationResponse(CamelModel):
    id: int
    name: str
    address: str
    coordinates: Optional[CoordinatesResponse] = None


class CustomerResponse(CamelModel):
    name: str
    email: str
    phone: str


class TrackingResponse(CamelModel):
    """Fully hydrated tracking."""
    id: str
    name: str
    start_location: LocationResponse
    end_location: LocationResponse
    stopovers: List[LocationResponse]
    user: CustomerResponse
    status: TrackingStatus
    current_location_index: int
    estimated_delivery: Optional[datetime] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("estimated_delivery", "created_at", "updated_at")
    def serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return format_timestamp(value)


class TimelineEntry(CamelModel):
    index: int
    location: LocationResponse
    state: LocationState


class TimelineResponse(CamelModel):
    """Route of a tracking with each location classified against the package position."""
    tracking_id: str
    status: TrackingStatus
    current_location_index: int
    entries: List[TimelineEntry]


class TrackingSummary(CamelModel):
    """Tracking counts per status, for the admin dashboard."""
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0


class ImageUploadResponse(CamelModel):
    image_url: str


class MessageResponse(BaseModel):
    message: str
