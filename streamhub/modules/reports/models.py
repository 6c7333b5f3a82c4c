import uuid

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID

from streamhub.core.db import Base
from streamhub.modules.audit.models import JSONType

class RevenueReport(Base):
    __tablename__ = "revenue_report"
    __table_args__ = (
        CheckConstraint("report_period_start <= report_period_end", name="ck_report_period"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    report_period_start = Column(Date, nullable=False)
    report_period_end = Column(Date, nullable=False)
    total_revenue = Column(Numeric(15, 2), nullable=False)
    active_users_count = Column(Integer, nullable=False)
    metrics = Column(JSONType, nullable=True)
    generated_date = Column(DateTime, nullable=False, index=True)
    created_by = Column(String(255), nullable=True)
