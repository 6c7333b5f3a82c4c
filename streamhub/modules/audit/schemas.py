from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from streamhub.modules.audit.models import AuditAction

class AuditLogRead(BaseModel):
    id: UUID
    table_name: str
    action: AuditAction
    record_id: str
    old_value: Optional[Dict[str, Any]]
    new_value: Optional[Dict[str, Any]]
    performed_by: Optional[str]
    timestamp: datetime

    class Config:
        from_attributes = True

class AuditLogListResponse(BaseModel):
    items: List[AuditLogRead]
    total: int
    page: int
    size: int
