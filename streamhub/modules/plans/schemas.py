from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

class PlanBase(BaseModel):
    plan_name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    duration_days: int = Field(30, gt=0)
    features: Optional[Dict[str, Any]] = None
    is_active: bool = True

class PlanCreate(PlanBase):
    created_by: Optional[str] = None

class PlanActiveUpdate(BaseModel):
    is_active: bool
    updated_by: Optional[str] = None

class PlanRead(PlanBase):
    id: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
