from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from streamhub.modules.subscriptions.models import SubscriptionStatus

class SubscriptionCreate(BaseModel):
    user_id: UUID
    plan_id: UUID
    start_date: Optional[date] = None # defaults to today
    created_by: Optional[str] = None

class SubscriptionCancel(BaseModel):
    performed_by: Optional[str] = None
    reason: Optional[str] = None

class SubscriptionRead(BaseModel):
    id: UUID
    user_id: UUID
    plan_id: UUID
    start_date: date
    end_date: date
    status: SubscriptionStatus
    version_id: int
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ExpirySweepResult(BaseModel):
    as_of: date
    expired_count: int
    expired_ids: List[UUID]
