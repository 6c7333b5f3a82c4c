from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from streamhub.modules.access.models import AccessStatus

class AccessRequest(BaseModel):
    user_id: UUID
    ip_address: Optional[str] = Field(None, max_length=45)
    user_agent: Optional[str] = Field(None, max_length=512)

class AccessLogCreate(AccessRequest):
    content_id: UUID
    access_status: AccessStatus
    content_title_snapshot: Optional[str] = None

class AccessLogRead(BaseModel):
    id: UUID
    content_id: UUID
    user_id: UUID
    access_status: AccessStatus
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    content_title_snapshot: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True

class AccessLogListResponse(BaseModel):
    items: List[AccessLogRead]
    total: int
    page: int
    size: int

class AccessDecision(BaseModel):
    content_id: UUID
    user_id: UUID
    access_status: AccessStatus
    granted: bool
    subscription_id: Optional[UUID] = None
    view_count: Optional[int] = None
    log_id: UUID
