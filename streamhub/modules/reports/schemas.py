from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel

class RevenueReportCreate(BaseModel):
    period_start: date
    period_end: date
    created_by: Optional[str] = None

class RevenueReportRead(BaseModel):
    id: UUID
    report_period_start: date
    report_period_end: date
    total_revenue: Decimal
    active_users_count: int
    metrics: Optional[Dict[str, Any]] = None
    generated_date: datetime
    created_by: Optional[str] = None

    class Config:
        from_attributes = True
