"""
Audit log Pydantic schemas.
"""

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, Dict, Any


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    actor_username: Optional[str] = None
    tracking_id: Optional[str] = None
    meta_data: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    timestamp: datetime
